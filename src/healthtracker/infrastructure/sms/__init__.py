"""SMS infrastructure package."""

from healthtracker.infrastructure.sms.twilio_gateway import (
    SmsDeliveryError,
    SmsReceipt,
    TwilioSmsGateway,
)

__all__ = ["SmsDeliveryError", "SmsReceipt", "TwilioSmsGateway"]
