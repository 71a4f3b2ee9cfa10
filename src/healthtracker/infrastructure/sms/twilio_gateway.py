"""
Twilio SMS Gateway

Thin async wrapper around the Twilio REST client. The SDK is blocking,
so sends run in a worker thread. No retries.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from healthtracker.config import get_settings
from healthtracker.config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SmsReceipt:
    """Twilio's acknowledgement of a queued message."""

    sid: str
    status: str
    to: str
    from_number: str


class SmsDeliveryError(Exception):
    """
    Twilio rejected the send.

    Attributes:
        code: Twilio error code, when Twilio returned one
        status: HTTP status of the Twilio response
    """

    def __init__(self, message: str, code: Optional[int] = None, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


class TwilioSmsGateway:
    """
    Sends SMS through Twilio.

    Usage:
        gateway = TwilioSmsGateway()
        receipt = await gateway.send("+15551234567", "Time to log lunch")
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        client: Optional[Client] = None,
    ) -> None:
        settings = get_settings().twilio
        self._account_sid = account_sid or settings.account_sid
        self._auth_token = auth_token or settings.auth_token.get_secret_value()
        self._from_number = from_number or settings.phone_number
        self._client = client

    def is_configured(self) -> bool:
        return self._client is not None or bool(
            self._account_sid and self._auth_token and self._from_number
        )

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = Client(self._account_sid, self._auth_token)
        return self._client

    def _send_blocking(self, to: str, body: str) -> SmsReceipt:
        message = self._get_client().messages.create(
            body=body,
            from_=self._from_number,
            to=to,
        )
        return SmsReceipt(
            sid=message.sid,
            status=str(message.status),
            to=message.to or to,
            from_number=message.from_ or self._from_number,
        )

    async def send(self, to: str, body: str) -> SmsReceipt:
        """
        Send one SMS.

        Args:
            to: Recipient in E.164 format
            body: Message text

        Returns:
            SmsReceipt with the message SID and status

        Raises:
            SmsDeliveryError: If Twilio rejects the request
        """
        if not self.is_configured():
            raise SmsDeliveryError("Twilio is not configured")

        logger.info("Sending SMS", length=len(body))

        try:
            receipt = await asyncio.to_thread(self._send_blocking, to, body)
        except TwilioRestException as e:
            logger.error("Twilio rejected SMS", code=e.code, status=e.status, error=e.msg)
            raise SmsDeliveryError(e.msg or "Unknown error", code=e.code, status=e.status) from e

        logger.info("SMS sent", message_sid=receipt.sid, status=receipt.status)
        return receipt
