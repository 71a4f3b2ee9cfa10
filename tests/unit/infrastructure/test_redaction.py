"""
Unit Tests for Log and Sentry Redaction

Credentials, push tokens and phone numbers must never leave the process.
"""

from healthtracker.config.logging_config import REDACTED, redact_sensitive_data
from healthtracker.infrastructure.monitoring.sentry_integration import before_send, scrub_text


class TestLogRedaction:

    def test_sensitive_keys(self):
        event = redact_sensitive_data(None, "info", {
            "event": "Device registered",
            "fcm_token": "abc",
            "phoneNumber": "+15551234567",
            "user_id": "uid-alice",
        })

        assert event["fcm_token"] == REDACTED
        assert event["phoneNumber"] == REDACTED
        assert event["user_id"] == "uid-alice"

    def test_nested_and_inline_phone(self):
        event = redact_sensitive_data(None, "info", {
            "event": "SMS failed for +15551234567",
            "context": {"auth-token": "x", "attempt": 1},
        })

        assert event["event"] == f"SMS failed for {REDACTED}"
        assert event["context"] == {"auth-token": REDACTED, "attempt": 1}


class TestSentryScrubbing:

    def test_inline_credentials(self):
        text = scrub_text("Authorization: Bearer eyJhbGciOi.abc api_key=sk-123")

        assert "eyJhbGciOi" not in text
        assert "sk-123" not in text

    def test_event_sections(self):
        event = before_send({
            "request": {
                "headers": {"Authorization": "Bearer abc", "User-Agent": "Mozilla"},
                "data": {"phoneNumber": "+15551234567", "message": "hi"},
            },
            "breadcrumbs": {"values": [{"message": "UPDATE devices SET token='tok'", "data": {}}]},
            "extra": {"password": "hunter2"},
        }, {})

        assert event["request"]["headers"]["Authorization"] == REDACTED
        assert event["request"]["headers"]["User-Agent"] == "Mozilla"
        assert event["request"]["data"]["phoneNumber"] == REDACTED
        assert "tok'" not in event["breadcrumbs"]["values"][0]["message"]
        assert event["extra"]["password"] == REDACTED
