"""
HealthTrackerAI Logging Configuration

structlog over the stdlib root logger. Every entry carries the service
name, version and, inside a request, its correlation id. Credentials,
FCM tokens and phone numbers never reach the output.
"""

import logging
import re
import sys
from typing import Any, Mapping

import structlog

from healthtracker import __version__
from healthtracker.config.settings import Settings

REDACTED = "[REDACTED]"

# Any key containing one of these fragments has its value dropped
SENSITIVE_KEY_FRAGMENTS: tuple[str, ...] = (
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "private_key",
    "phone",
    "vapid",
)

# E.164 numbers can turn up inside free-text messages
_PHONE_IN_TEXT = re.compile(r"\+\d{8,15}\b")

QUIET_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "openai",
    "twilio.http_client",
    "google.auth",
)


def _is_sensitive(key: str) -> bool:
    lowered = key.lower().replace("-", "_")
    return any(fragment in lowered for fragment in SENSITIVE_KEY_FRAGMENTS)


def scrub(key: str, value: Any) -> Any:
    """Redacted copy of `value`; `key` is the name it was logged or sent under."""
    if _is_sensitive(key):
        return REDACTED
    if isinstance(value, Mapping):
        return {k: scrub(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [scrub(key, item) for item in value]
    if isinstance(value, str):
        return _PHONE_IN_TEXT.sub(REDACTED, value)
    return value


def redact_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor: scrub secrets and phone numbers, recursively."""
    return {key: scrub(key, value) for key, value in event_dict.items()}


def add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("service", "healthtracker-backend")
    event_dict.setdefault("version", __version__)
    return event_dict


def build_processors(json_output: bool) -> list[Any]:
    """Processor chain; JSON for log shipping, colored console otherwise."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_data,
        add_service_context,
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog and the stdlib root logger.

    Call once at startup, before the first logger is used.
    """
    level = logging.getLevelName(settings.log_level)

    structlog.configure(
        processors=build_processors(json_output=settings.env != "development"),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """Attach the request's correlation id to every entry logged in this context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
