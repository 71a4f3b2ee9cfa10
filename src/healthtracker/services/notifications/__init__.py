"""Push notification services package."""

from healthtracker.services.notifications.payloads import (
    NotificationAction,
    NotificationOptions,
    NotificationPayload,
    ShownNotification,
)
from healthtracker.services.notifications.push_tokens import (
    MessagingBackend,
    NotificationPermissionDeniedError,
    NotificationsUnsupportedError,
    PushNotificationError,
    PushTokenManager,
)
from healthtracker.services.notifications.relay import (
    FIREBASE_CONFIG_MESSAGE,
    ServiceWorkerRelay,
)

__all__ = [
    "NotificationAction",
    "NotificationOptions",
    "NotificationPayload",
    "ShownNotification",
    "MessagingBackend",
    "NotificationPermissionDeniedError",
    "NotificationsUnsupportedError",
    "PushNotificationError",
    "PushTokenManager",
    "FIREBASE_CONFIG_MESSAGE",
    "ServiceWorkerRelay",
]
