"""
Sentry Error Tracking Integration

Events are scrubbed with the same rules as the logs before they leave
the process, plus a pass over free text for inline credentials.
"""

import re
from typing import Any, Optional

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from healthtracker.config.logging_config import REDACTED, get_logger, scrub

logger = get_logger(__name__)

# key=value or key: value credentials embedded in messages and SQL
_INLINE_SECRET = re.compile(
    r"(password|api[_-]?key|token|secret|authorization)([\"']?\s*[:=]\s*[\"']?)[^\"'\s,}]+",
    re.IGNORECASE,
)
_BEARER = re.compile(r"bearer\s+[\w\-.~+/]+=*", re.IGNORECASE)


def scrub_text(value: str) -> str:
    value = _BEARER.sub(f"Bearer {REDACTED}", value)
    value = _INLINE_SECRET.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", value)
    return scrub("", value)


def _scrub_strings(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _scrub_strings(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub_strings(item) for item in value]
    if isinstance(value, str):
        return scrub_text(value)
    return value


def _scrub_section(section: Any) -> Any:
    return _scrub_strings(scrub("", section))


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """Scrub request body, headers, breadcrumbs and extras."""
    request = event.get("request") or {}
    for part in ("data", "headers", "cookies", "query_string"):
        if part in request:
            request[part] = _scrub_section(request[part])

    for breadcrumb in (event.get("breadcrumbs") or {}).get("values", []):
        if "data" in breadcrumb:
            breadcrumb["data"] = _scrub_section(breadcrumb["data"])
        if isinstance(breadcrumb.get("message"), str):
            breadcrumb["message"] = scrub_text(breadcrumb["message"])

    if "extra" in event:
        event["extra"] = _scrub_section(event["extra"])

    return event


def init_sentry(
    dsn: str,
    environment: str = "development",
    release: Optional[str] = None,
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry; an empty DSN leaves error tracking off.

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.warning("Sentry DSN not configured, error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        before_send=before_send,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            AsyncioIntegration(),
            # structlog already renders; only exceptions become events
            LoggingIntegration(level=None, event_level=None),
        ],
        send_default_pii=False,
        max_breadcrumbs=50,
    )

    logger.info("Sentry initialized", environment=environment, release=release)
    return True


def set_user_context(user_id: str) -> None:
    """Tag subsequent events with the Firebase uid only."""
    sentry_sdk.set_user({"id": user_id})


def capture_exception_with_context(
    exception: Exception,
    correlation_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> Optional[str]:
    """Report `exception` in its own scope; returns the event id, if any."""
    with sentry_sdk.new_scope() as scope:
        if correlation_id:
            scope.set_tag("correlation_id", correlation_id)
        for key, value in _scrub_section(extra or {}).items():
            scope.set_extra(key, value)
        return scope.capture_exception(exception)
