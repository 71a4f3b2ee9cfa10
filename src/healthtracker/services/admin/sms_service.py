"""
Admin SMS Service

Validates an admin's SMS request against the target user's Firebase
record and sends it through the SMS gateway. Twilio error codes with
a known cause are turned into messages an admin can act on.
"""

from typing import Optional, Protocol

from healthtracker.config.logging_config import get_logger
from healthtracker.infrastructure.firebase.admin_client import (
    FirebaseUser,
    FirebaseUserNotFoundError,
)
from healthtracker.infrastructure.metrics import track_sms
from healthtracker.infrastructure.sms.twilio_gateway import SmsDeliveryError, SmsReceipt

logger = get_logger(__name__)

MAX_SMS_LENGTH = 160

TWILIO_ERROR_MESSAGES: dict[int, str] = {
    21211: "Invalid phone number format",
    21614: (
        "Phone number not verified (required for trial accounts). "
        "Please verify this number in your Twilio console."
    ),
    30007: (
        "Message blocked by carrier spam filter. Try using more natural, complete "
        "sentences and avoid test messages like 'hello' or 'test'."
    ),
}


class SmsSender(Protocol):
    async def send(self, to: str, body: str) -> SmsReceipt:
        ...


class UserLookup(Protocol):
    async def get_user(self, uid: str) -> FirebaseUser:
        ...


class SmsRequestError(Exception):
    """SMS request rejected; carries the HTTP status to report."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SmsService:
    """Sends admin SMS to registered users."""

    def __init__(self, gateway: SmsSender, users: UserLookup) -> None:
        self._gateway = gateway
        self._users = users

    @staticmethod
    def validate(user_id: Optional[str], phone_number: Optional[str], message: Optional[str]) -> None:
        """
        Check request fields.

        Raises:
            SmsRequestError: Missing field or message over 160 characters
        """
        if not user_id or not phone_number or not message:
            raise SmsRequestError("Missing required fields")
        if len(message) > MAX_SMS_LENGTH:
            raise SmsRequestError(f"Message too long (max {MAX_SMS_LENGTH} characters)")

    async def send_to_user(
        self,
        user_id: Optional[str],
        phone_number: Optional[str],
        message: Optional[str],
    ) -> SmsReceipt:
        """
        Send an SMS to a user's verified phone number.

        Args:
            user_id: Firebase uid of the recipient
            phone_number: Number the admin expects the user to have
            message: Body, at most 160 characters

        Returns:
            SmsReceipt from the gateway

        Raises:
            SmsRequestError: Validation failure or Twilio rejection
        """
        try:
            self.validate(user_id, phone_number, message)
        except SmsRequestError:
            track_sms("rejected")
            raise

        try:
            user = await self._users.get_user(user_id)
        except FirebaseUserNotFoundError as e:
            track_sms("rejected")
            raise SmsRequestError("User not found", status_code=404) from e

        if user.phone_number != phone_number:
            track_sms("rejected")
            raise SmsRequestError("Phone number mismatch")

        try:
            receipt = await self._gateway.send(phone_number, message)
        except SmsDeliveryError as e:
            known = TWILIO_ERROR_MESSAGES.get(e.code) if e.code is not None else None
            if known:
                track_sms("rejected")
                raise SmsRequestError(known) from e
            track_sms("failed")
            raise SmsRequestError(f"Failed to send SMS: {str(e) or 'Unknown error'}", status_code=500) from e

        track_sms("sent")
        logger.info("Admin SMS sent", user_id=user_id, message_sid=receipt.sid)
        return receipt
