"""
Unit Tests for Push Token Manager

Tests permission negotiation, token retrieval and test notifications.
"""

import asyncio
from dataclasses import replace
from typing import Optional

import pytest

from healthtracker.domain.models.browser import NotificationPermission
from healthtracker.services.notifications import (
    NotificationPayload,
    NotificationPermissionDeniedError,
    NotificationsUnsupportedError,
    PushNotificationError,
    PushTokenManager,
)
from healthtracker.services.notifications.payloads import IOS_VIBRATION, STANDARD_VIBRATION

VAPID_KEY = "BExampleVapidPublicKey"


class FakeMessagingBackend:
    """Scriptable stand-in for the browser messaging SDK."""

    def __init__(
        self,
        supported: bool = True,
        permission: NotificationPermission = NotificationPermission.DEFAULT,
        grant: NotificationPermission = NotificationPermission.GRANTED,
        token: Optional[str] = "fcm-token-123",
        token_error: Optional[Exception] = None,
        request_error: Optional[Exception] = None,
    ) -> None:
        self.supported = supported
        self._permission = permission
        self.grant = grant
        self.token = token
        self.token_error = token_error
        self.request_error = request_error
        self.permission_requests = 0
        self.requested_vapid_key: Optional[str] = None
        self.listeners = []

    async def is_supported(self) -> bool:
        return self.supported

    def permission(self) -> NotificationPermission:
        return self._permission

    async def request_permission(self) -> NotificationPermission:
        self.permission_requests += 1
        if self.request_error is not None:
            raise self.request_error
        self._permission = self.grant
        return self.grant

    async def get_token(self, vapid_key: str) -> Optional[str]:
        self.requested_vapid_key = vapid_key
        if self.token_error is not None:
            raise self.token_error
        return self.token

    def on_message(self, callback) -> None:
        self.listeners.append(callback)


class TestRequestPermission:

    def test_unsupported_browser(self, chrome_android_env):
        env = replace(chrome_android_env, has_notification=False)
        manager = PushTokenManager(env, FakeMessagingBackend())

        with pytest.raises(NotificationsUnsupportedError) as exc_info:
            asyncio.run(manager.request_permission())

        assert exc_info.value.browser_info["supportsNotifications"] is False

    def test_already_granted_skips_prompt(self, chrome_android_env):
        backend = FakeMessagingBackend(permission=NotificationPermission.GRANTED)
        manager = PushTokenManager(chrome_android_env, backend)

        assert asyncio.run(manager.request_permission()) == NotificationPermission.GRANTED
        assert backend.permission_requests == 0

    def test_denied_raises(self, chrome_android_env):
        backend = FakeMessagingBackend(permission=NotificationPermission.DENIED)
        manager = PushTokenManager(chrome_android_env, backend)

        with pytest.raises(NotificationPermissionDeniedError):
            asyncio.run(manager.request_permission())
        assert backend.permission_requests == 0

    def test_default_asks_user(self, chrome_android_env):
        backend = FakeMessagingBackend()
        manager = PushTokenManager(chrome_android_env, backend)

        assert asyncio.run(manager.request_permission()) == NotificationPermission.GRANTED
        assert backend.permission_requests == 1

    def test_request_failure_is_wrapped(self, chrome_android_env):
        backend = FakeMessagingBackend(request_error=RuntimeError("blocked by policy"))
        manager = PushTokenManager(chrome_android_env, backend)

        with pytest.raises(PushNotificationError, match="blocked by policy"):
            asyncio.run(manager.request_permission())


class TestGetToken:

    def test_happy_path(self, chrome_android_env):
        backend = FakeMessagingBackend()
        manager = PushTokenManager(chrome_android_env, backend, vapid_key=VAPID_KEY)

        assert asyncio.run(manager.get_token()) == "fcm-token-123"
        assert backend.requested_vapid_key == VAPID_KEY

    def test_unsupported_messaging_returns_none(self, chrome_android_env):
        manager = PushTokenManager(chrome_android_env, FakeMessagingBackend(supported=False), VAPID_KEY)

        assert asyncio.run(manager.get_token()) is None

    def test_permission_not_granted_returns_none(self, chrome_android_env):
        backend = FakeMessagingBackend(grant=NotificationPermission.DEFAULT)
        manager = PushTokenManager(chrome_android_env, backend, VAPID_KEY)

        assert asyncio.run(manager.get_token()) is None

    def test_denied_returns_none(self, chrome_android_env):
        backend = FakeMessagingBackend(permission=NotificationPermission.DENIED)
        manager = PushTokenManager(chrome_android_env, backend, VAPID_KEY)

        assert asyncio.run(manager.get_token()) is None

    def test_missing_vapid_key_returns_none(self, chrome_android_env):
        backend = FakeMessagingBackend()
        manager = PushTokenManager(chrome_android_env, backend, vapid_key=None)

        assert asyncio.run(manager.get_token()) is None
        assert backend.requested_vapid_key is None

    def test_sdk_error_returns_none(self, chrome_android_env):
        backend = FakeMessagingBackend(token_error=RuntimeError("messaging/token-subscribe-failed"))
        manager = PushTokenManager(chrome_android_env, backend, VAPID_KEY)

        assert asyncio.run(manager.get_token()) is None

    def test_empty_token_returns_none(self, chrome_android_env):
        manager = PushTokenManager(chrome_android_env, FakeMessagingBackend(token=""), VAPID_KEY)

        assert asyncio.run(manager.get_token()) is None


class TestForegroundMessages:

    def test_listener_forwards_payload(self, chrome_android_env):
        backend = FakeMessagingBackend()
        manager = PushTokenManager(chrome_android_env, backend)
        received = []

        assert asyncio.run(manager.on_foreground_message(received.append))
        backend.listeners[0]({"notification": {"title": "Hi"}})

        assert received == [{"notification": {"title": "Hi"}}]

    def test_unsupported_registers_nothing(self, chrome_android_env):
        backend = FakeMessagingBackend(supported=False)
        manager = PushTokenManager(chrome_android_env, backend)

        assert not asyncio.run(manager.on_foreground_message(lambda payload: None))
        assert backend.listeners == []


class TestTestNotification:

    def test_requires_granted_permission(self, chrome_android_env):
        manager = PushTokenManager(chrome_android_env, FakeMessagingBackend())

        with pytest.raises(PushNotificationError):
            manager.build_test_notification(NotificationPayload(title="Test", body="Hello"))

    def test_android_gets_vibration_and_actions(self, chrome_android_env):
        backend = FakeMessagingBackend(permission=NotificationPermission.GRANTED)
        manager = PushTokenManager(chrome_android_env, backend)

        shown = manager.build_test_notification(NotificationPayload(title="Test", body="Hello"))
        options = shown.options.to_dict()

        assert shown.title == "Test"
        assert options["tag"] == "test-notification"
        assert options["icon"] == "/favicon.ico"
        assert options["vibrate"] == STANDARD_VIBRATION
        assert options["actions"] == [{"action": "view", "title": "View"}]

    def test_ios_gets_short_vibration_without_actions(self, iphone_env):
        backend = FakeMessagingBackend(permission=NotificationPermission.GRANTED)
        manager = PushTokenManager(iphone_env, backend)

        options = manager.build_test_notification(NotificationPayload(title="T", body="B")).options.to_dict()

        assert options["vibrate"] == IOS_VIBRATION
        assert "actions" not in options

    def test_desktop_has_no_extras(self, desktop_chrome_env):
        backend = FakeMessagingBackend(permission=NotificationPermission.GRANTED)
        manager = PushTokenManager(desktop_chrome_env, backend)

        options = manager.build_test_notification(NotificationPayload(title="T", body="B")).options.to_dict()

        assert "vibrate" not in options
        assert "actions" not in options
