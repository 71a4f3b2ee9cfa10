"""
Prometheus Metrics

Metrics for HealthTrackerAI backend observability.
Exposed at /metrics for Prometheus scraping.

Only increment/observe here; never block on metrics operations.
"""

import time
from functools import wraps
from typing import Callable

from fastapi import APIRouter, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    Info,
    generate_latest,
)

# =============================================================================
# LLM METRICS
# =============================================================================

LLM_REQUESTS_TOTAL = Counter(
    "healthtracker_llm_requests_total",
    "Total LLM requests by provider",
    ["provider", "status"],  # success, error, rate_limited
)

LLM_LATENCY = Histogram(
    "healthtracker_llm_latency_seconds",
    "LLM response latency",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

LLM_TOKENS_USED = Counter(
    "healthtracker_llm_tokens_total",
    "Total tokens used by LLM",
    ["provider", "type"],  # input, output
)

# =============================================================================
# MESSAGING METRICS
# =============================================================================

SMS_MESSAGES_TOTAL = Counter(
    "healthtracker_sms_messages_total",
    "Admin SMS send attempts",
    ["status"],  # sent, rejected, failed
)

PUSH_NOTIFICATIONS_TOTAL = Counter(
    "healthtracker_push_notifications_total",
    "Admin push notification sends",
    ["result"],  # sent, disabled, failed
)

# =============================================================================
# SUPPORT METRICS
# =============================================================================

TICKETS_CREATED_TOTAL = Counter(
    "healthtracker_tickets_created_total",
    "Support tickets opened",
    ["owner_type"],  # user, anonymous
)

TICKET_REPLIES_TOTAL = Counter(
    "healthtracker_ticket_replies_total",
    "Replies added to support tickets",
    ["author"],  # admin, user
)

# =============================================================================
# API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "healthtracker_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "healthtracker_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

RATE_LIMIT_EXCEEDED = Counter(
    "healthtracker_rate_limit_exceeded_total",
    "Rate limit exceeded events",
    ["client_type"],  # standard, admin
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "healthtracker_system",
    "HealthTrackerAI backend information",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_llm_request(provider: str) -> Callable:
    """
    Decorate an async `generate` to count calls, tokens and latency.

    Throttling is told apart from other failures by exception name, which
    matches both the SDK's and our own RateLimitError.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                response = await func(*args, **kwargs)
            except Exception as e:
                outcome = "rate_limited" if type(e).__name__ == "RateLimitError" else "error"
                LLM_REQUESTS_TOTAL.labels(provider=provider, status=outcome).inc()
                raise
            finally:
                LLM_LATENCY.labels(provider=provider).observe(time.perf_counter() - started)

            LLM_REQUESTS_TOTAL.labels(provider=provider, status="success").inc()
            LLM_TOKENS_USED.labels(provider=provider, type="input").inc(response.prompt_tokens)
            LLM_TOKENS_USED.labels(provider=provider, type="output").inc(response.completion_tokens)
            return response
        return wrapper
    return decorator


def track_http_request(method: str, endpoint: str, status_code: int, duration_seconds: float) -> None:
    HTTP_REQUESTS_TOTAL.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
    HTTP_REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)


def track_sms(status: str) -> None:
    SMS_MESSAGES_TOTAL.labels(status=status).inc()


def track_push(result: str) -> None:
    PUSH_NOTIFICATIONS_TOTAL.labels(result=result).inc()


def update_system_info(environment: str, version: str) -> None:
    SYSTEM_INFO.info({"version": version, "environment": environment})


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus text exposition of the default registry."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
