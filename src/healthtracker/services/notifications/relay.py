"""
Service-Worker Notification Relay

Receives the Firebase config from the page, initializes messaging
once, shows background pushes as system notifications and routes
notification clicks back to an app window.
"""

from typing import Any, Awaitable, Callable, Optional, Protocol

from healthtracker.config.logging_config import get_logger
from healthtracker.services.notifications.payloads import (
    DEFAULT_BODY,
    DEFAULT_ICON,
    DEFAULT_TAG,
    DEFAULT_TITLE,
    DISMISS_ACTION,
    STANDARD_VIBRATION,
    VIEW_ACTION,
    NotificationOptions,
    ShownNotification,
)

logger = get_logger(__name__)

FIREBASE_CONFIG_MESSAGE = "FIREBASE_CONFIG"

BackgroundHandler = Callable[[dict[str, Any]], Awaitable[ShownNotification]]


class MessagingClient(Protocol):
    """Messaging instance created from the Firebase config."""

    def on_background_message(self, handler: BackgroundHandler) -> None:
        ...


class ServiceWorkerRegistration(Protocol):
    async def show_notification(self, title: str, options: dict) -> None:
        ...


class WindowClient(Protocol):
    url: str

    async def focus(self) -> "WindowClient":
        ...


class ClientsApi(Protocol):
    """The service worker's `clients` global."""

    async def match_all(self, *, include_uncontrolled: bool = True) -> list[WindowClient]:
        ...

    async def open_window(self, url: str) -> Optional[WindowClient]:
        ...


class ShownNotificationHandle(Protocol):
    def close(self) -> None:
        ...


MessagingFactory = Callable[[dict], MessagingClient]


class ServiceWorkerRelay:
    """
    Background notification relay.

    Messaging is initialized at most once per relay, from the first
    FIREBASE_CONFIG message carrying a config.
    """

    def __init__(
        self,
        registration: ServiceWorkerRegistration,
        clients: ClientsApi,
        messaging_factory: MessagingFactory,
        app_url: str = "/",
    ) -> None:
        self._registration = registration
        self._clients = clients
        self._messaging_factory = messaging_factory
        self._app_url = app_url
        self._messaging: Optional[MessagingClient] = None
        self._config: Optional[dict] = None

    @property
    def is_initialized(self) -> bool:
        return self._messaging is not None

    @property
    def config(self) -> Optional[dict]:
        return self._config

    def handle_message(self, data: Optional[dict]) -> bool:
        """
        Handle a page -> worker message.

        Returns:
            True if this message initialized messaging
        """
        if not data or data.get("type") != FIREBASE_CONFIG_MESSAGE:
            return False

        config = data.get("config")
        if not config or self.is_initialized:
            return False

        self._config = config
        self._messaging = self._messaging_factory(config)
        self._messaging.on_background_message(self.handle_background_message)
        logger.info("Service worker messaging initialized", project_id=config.get("projectId"))
        return True

    @staticmethod
    def build_background_notification(payload: dict[str, Any]) -> ShownNotification:
        """Map an FCM background payload to a system notification."""
        notification = payload.get("notification") or {}
        data = payload.get("data")

        options = NotificationOptions(
            body=notification.get("body") or DEFAULT_BODY,
            icon=DEFAULT_ICON,
            badge=DEFAULT_ICON,
            data=data,
            tag=(data or {}).get("tag") or DEFAULT_TAG,
            require_interaction=False,
            silent=False,
            vibrate=list(STANDARD_VIBRATION),
            actions=[VIEW_ACTION, DISMISS_ACTION],
        )
        return ShownNotification(title=notification.get("title") or DEFAULT_TITLE, options=options)

    async def handle_background_message(self, payload: dict[str, Any]) -> ShownNotification:
        shown = self.build_background_notification(payload)
        logger.debug("Background message received", tag=shown.options.tag)
        await self._registration.show_notification(shown.title, shown.options.to_dict())
        return shown

    async def handle_notification_click(
        self,
        notification: ShownNotificationHandle,
        action: str = "",
    ) -> Optional[WindowClient]:
        """
        Handle a notification click.

        Args:
            notification: Clicked notification
            action: Action id; empty for a body click

        Returns:
            The focused or opened window, if any
        """
        notification.close()

        if action == DISMISS_ACTION.action:
            return None

        for client in await self._clients.match_all(include_uncontrolled=True):
            if self._app_url in client.url:
                return await client.focus()

        return await self._clients.open_window(self._app_url)
