"""Metrics infrastructure package."""

from healthtracker.infrastructure.metrics.prometheus_metrics import (
    # LLM metrics
    LLM_REQUESTS_TOTAL,
    LLM_LATENCY,
    LLM_TOKENS_USED,
    # Messaging metrics
    SMS_MESSAGES_TOTAL,
    PUSH_NOTIFICATIONS_TOTAL,
    # Support metrics
    TICKETS_CREATED_TOTAL,
    TICKET_REPLIES_TOTAL,
    # API metrics
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION,
    RATE_LIMIT_EXCEEDED,
    # Helpers
    track_llm_request,
    track_http_request,
    track_sms,
    track_push,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "LLM_REQUESTS_TOTAL",
    "LLM_LATENCY",
    "LLM_TOKENS_USED",
    "SMS_MESSAGES_TOTAL",
    "PUSH_NOTIFICATIONS_TOTAL",
    "TICKETS_CREATED_TOTAL",
    "TICKET_REPLIES_TOTAL",
    "HTTP_REQUESTS_TOTAL",
    "HTTP_REQUEST_DURATION",
    "RATE_LIMIT_EXCEEDED",
    "track_llm_request",
    "track_http_request",
    "track_sms",
    "track_push",
    "update_system_info",
    "metrics_router",
]
