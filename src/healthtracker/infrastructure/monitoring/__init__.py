"""Monitoring infrastructure package."""

from healthtracker.infrastructure.monitoring.sentry_integration import (
    capture_exception_with_context,
    init_sentry,
    set_user_context,
)

__all__ = [
    "init_sentry",
    "set_user_context",
    "capture_exception_with_context",
]
