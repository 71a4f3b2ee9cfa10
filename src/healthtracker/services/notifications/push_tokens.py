"""
Push Token Manager

Negotiates notification permission and obtains the FCM registration
token for a client. The messaging SDK sits behind MessagingBackend so
the policy can run against the browser bridge or a fake.

Token retrieval never raises: every failure is logged and reported as
None. Permission requests raise typed errors the UI can explain.
"""

from typing import Any, Callable, Optional, Protocol

from healthtracker.config.logging_config import get_logger
from healthtracker.domain.models.browser import BrowserEnvironment, NotificationPermission
from healthtracker.services.notifications.payloads import (
    IOS_VIBRATION,
    STANDARD_VIBRATION,
    TEST_TAG,
    NotificationAction,
    NotificationOptions,
    NotificationPayload,
    ShownNotification,
)
from healthtracker.services.pwa.browser_detector import detect_browser

logger = get_logger(__name__)

MessageCallback = Callable[[dict[str, Any]], None]


class MessagingBackend(Protocol):
    """Browser-side Firebase messaging and Notification API."""

    async def is_supported(self) -> bool:
        ...

    def permission(self) -> NotificationPermission:
        ...

    async def request_permission(self) -> NotificationPermission:
        ...

    async def get_token(self, vapid_key: str) -> Optional[str]:
        ...

    def on_message(self, callback: MessageCallback) -> None:
        ...


class PushNotificationError(Exception):
    """Base error for permission negotiation."""


class NotificationsUnsupportedError(PushNotificationError):
    """The browser has no Notification API."""

    def __init__(self, browser_info: dict) -> None:
        super().__init__(f"This browser does not support notifications. Browser info: {browser_info}")
        self.browser_info = browser_info


class NotificationPermissionDeniedError(PushNotificationError):
    """The user has blocked notifications."""

    def __init__(self) -> None:
        super().__init__(
            "Notification permission was denied. "
            "Please enable notifications in your browser settings."
        )


class PushTokenManager:
    """
    Permission and FCM token negotiation for one client.

    Usage:
        manager = PushTokenManager(env, backend, vapid_key=settings.firebase.vapid_key)
        token = await manager.get_token()
    """

    def __init__(
        self,
        environment: BrowserEnvironment,
        backend: MessagingBackend,
        vapid_key: Optional[str] = None,
    ) -> None:
        self._environment = environment
        self._backend = backend
        self._vapid_key = vapid_key

    def _browser_info(self):
        return detect_browser(self._environment)

    async def request_permission(self) -> NotificationPermission:
        """
        Ask for notification permission if it is still undecided.

        Returns:
            Resulting permission

        Raises:
            NotificationsUnsupportedError: No Notification API
            NotificationPermissionDeniedError: Permission already denied
            PushNotificationError: The permission request itself failed
        """
        info = self._browser_info()
        if not info.supports_notifications:
            raise NotificationsUnsupportedError(info.to_dict())

        current = self._backend.permission()
        if current == NotificationPermission.GRANTED:
            return NotificationPermission.GRANTED
        if current == NotificationPermission.DENIED:
            raise NotificationPermissionDeniedError()

        try:
            permission = await self._backend.request_permission()
        except Exception as e:
            logger.error("Notification permission request failed", error=str(e))
            raise PushNotificationError(
                f"Failed to request notification permission: {e}"
            ) from e

        if info.is_ios and info.is_safari and permission == NotificationPermission.DEFAULT:
            logger.warning(
                "iOS Safari returned default permission; push support may be limited"
            )

        return permission

    async def get_token(self) -> Optional[str]:
        """
        Obtain the FCM registration token.

        Returns:
            Token, or None when messaging is unsupported, permission is
            not granted, the VAPID key is missing or the SDK fails
        """
        info = self._browser_info()
        try:
            if not await self._backend.is_supported():
                logger.warning("Firebase messaging not supported", browser=info.to_dict())
                return None

            permission = await self.request_permission()
            if permission != NotificationPermission.GRANTED:
                logger.warning("Notification permission not granted", permission=permission.value)
                return None

            if not self._vapid_key:
                logger.error("VAPID key not configured")
                return None

            token = await self._backend.get_token(self._vapid_key)
        except Exception as e:
            logger.error("Error getting FCM token", error=str(e), browser=info.to_dict())
            return None

        if not token:
            logger.warning("FCM returned no token", browser=info.to_dict())
            return None

        logger.info(
            "FCM token obtained",
            is_chrome=info.is_chrome,
            is_firefox=info.is_firefox,
            is_safari=info.is_safari,
            is_mobile=info.is_mobile,
        )
        return token

    async def on_foreground_message(self, callback: MessageCallback) -> bool:
        """
        Register a callback for messages received while the page is open.

        Returns:
            True if the listener was registered
        """
        if not await self._backend.is_supported():
            logger.warning("Foreground listener not set up; messaging not supported")
            return False

        def _forward(payload: dict[str, Any]) -> None:
            logger.debug("Foreground message received")
            callback(payload)

        self._backend.on_message(_forward)
        return True

    def build_test_notification(self, payload: NotificationPayload) -> ShownNotification:
        """
        Build a local test notification with per-platform extras.

        Raises:
            PushNotificationError: Permission is not granted
        """
        if self._backend.permission() != NotificationPermission.GRANTED:
            raise PushNotificationError("Notification permission not granted")

        info = self._browser_info()
        options = NotificationOptions(
            body=payload.body,
            icon=payload.icon or "/favicon.ico",
            badge=payload.badge or "/favicon.ico",
            tag=payload.tag or TEST_TAG,
            data=payload.data,
            require_interaction=payload.require_interaction,
            silent=payload.silent,
        )

        if info.is_mobile:
            options.vibrate = list(IOS_VIBRATION if info.is_ios else STANDARD_VIBRATION)
            # Safari renders actions poorly
            if not info.is_safari:
                options.actions = [NotificationAction(action="view", title="View")]

        return ShownNotification(title=payload.title, options=options)
