"""Admin services package."""

from healthtracker.services.admin.sms_service import (
    MAX_SMS_LENGTH,
    SmsRequestError,
    SmsService,
)
from healthtracker.services.admin.user_service import (
    AdminUserService,
    AdminUserView,
    DeviceNotFoundError,
    NotificationsDisabledError,
)

__all__ = [
    "MAX_SMS_LENGTH",
    "SmsRequestError",
    "SmsService",
    "AdminUserService",
    "AdminUserView",
    "DeviceNotFoundError",
    "NotificationsDisabledError",
]
