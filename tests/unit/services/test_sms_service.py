"""
Unit Tests for Admin SMS Service

Tests request validation, phone verification and Twilio error mapping.
"""

import asyncio
from typing import Optional

import pytest

from healthtracker.infrastructure.firebase import FirebaseUser, FirebaseUserNotFoundError
from healthtracker.infrastructure.sms import SmsDeliveryError, SmsReceipt
from healthtracker.services.admin import MAX_SMS_LENGTH, SmsRequestError, SmsService

PHONE = "+15551234567"


class FakeGateway:
    def __init__(self, error: Optional[SmsDeliveryError] = None) -> None:
        self.error = error
        self.sent: list[tuple[str, str]] = []

    async def send(self, to: str, body: str) -> SmsReceipt:
        if self.error is not None:
            raise self.error
        self.sent.append((to, body))
        return SmsReceipt(sid="SM123", status="queued", to=to, from_number="+15550000000")


class FakeUsers:
    def __init__(self, users: dict[str, FirebaseUser]) -> None:
        self.users = users

    async def get_user(self, uid: str) -> FirebaseUser:
        if uid not in self.users:
            raise FirebaseUserNotFoundError(f"User {uid} not found")
        return self.users[uid]


@pytest.fixture
def users() -> FakeUsers:
    return FakeUsers({
        "uid-alice": FirebaseUser(uid="uid-alice", email="alice@example.com", display_name="Alice", phone_number=PHONE),
    })


def _send(service: SmsService, user_id="uid-alice", phone=PHONE, message="Time to log your lunch!"):
    return asyncio.run(service.send_to_user(user_id, phone, message))


class TestValidation:

    @pytest.mark.parametrize("user_id,phone,message", [
        (None, PHONE, "hi there"),
        ("uid-alice", "", "hi there"),
        ("uid-alice", PHONE, None),
    ])
    def test_missing_fields(self, users, user_id, phone, message):
        gateway = FakeGateway()
        service = SmsService(gateway, users)

        with pytest.raises(SmsRequestError, match="Missing required fields") as exc_info:
            _send(service, user_id, phone, message)

        assert exc_info.value.status_code == 400
        assert gateway.sent == []

    def test_message_over_160_characters(self, users):
        gateway = FakeGateway()
        service = SmsService(gateway, users)

        with pytest.raises(SmsRequestError, match="Message too long") as exc_info:
            _send(service, message="x" * (MAX_SMS_LENGTH + 1))

        assert exc_info.value.status_code == 400
        assert gateway.sent == []

    def test_exactly_160_characters_allowed(self, users):
        gateway = FakeGateway()

        _send(SmsService(gateway, users), message="x" * MAX_SMS_LENGTH)

        assert len(gateway.sent) == 1


class TestRecipient:

    def test_unknown_user(self, users):
        with pytest.raises(SmsRequestError, match="User not found") as exc_info:
            _send(SmsService(FakeGateway(), users), user_id="uid-ghost")

        assert exc_info.value.status_code == 404

    def test_phone_mismatch(self, users):
        gateway = FakeGateway()

        with pytest.raises(SmsRequestError, match="Phone number mismatch"):
            _send(SmsService(gateway, users), phone="+15559999999")

        assert gateway.sent == []

    def test_success(self, users):
        gateway = FakeGateway()

        receipt = _send(SmsService(gateway, users))

        assert receipt.sid == "SM123"
        assert receipt.status == "queued"
        assert gateway.sent == [(PHONE, "Time to log your lunch!")]


class TestTwilioErrors:

    @pytest.mark.parametrize("code,fragment", [
        (21211, "Invalid phone number format"),
        (21614, "Phone number not verified"),
        (30007, "carrier spam filter"),
    ])
    def test_known_codes_are_client_errors(self, users, code, fragment):
        service = SmsService(FakeGateway(SmsDeliveryError("twilio said no", code=code, status=400)), users)

        with pytest.raises(SmsRequestError, match=fragment) as exc_info:
            _send(service)

        assert exc_info.value.status_code == 400

    def test_unknown_failure_is_server_error(self, users):
        service = SmsService(FakeGateway(SmsDeliveryError("Authenticate", code=20003, status=401)), users)

        with pytest.raises(SmsRequestError) as exc_info:
            _send(service)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to send SMS: Authenticate"
