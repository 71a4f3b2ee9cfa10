"""
Unit Tests for Service-Worker Relay

Tests config handshake, background notifications and click routing.
"""

import asyncio

import pytest

from healthtracker.services.notifications import FIREBASE_CONFIG_MESSAGE, ServiceWorkerRelay

FIREBASE_CONFIG = {"apiKey": "key", "projectId": "healthtracker-test", "appId": "1:2:web:3"}


class FakeMessaging:
    def __init__(self, config: dict) -> None:
        self.config = config
        self.handler = None

    def on_background_message(self, handler) -> None:
        self.handler = handler


class FakeRegistration:
    def __init__(self) -> None:
        self.shown: list[tuple[str, dict]] = []

    async def show_notification(self, title: str, options: dict) -> None:
        self.shown.append((title, options))


class FakeWindow:
    def __init__(self, url: str) -> None:
        self.url = url
        self.focused = False

    async def focus(self) -> "FakeWindow":
        self.focused = True
        return self


class FakeClients:
    def __init__(self, windows: list[FakeWindow]) -> None:
        self.windows = windows
        self.opened: list[str] = []

    async def match_all(self, *, include_uncontrolled: bool = True) -> list[FakeWindow]:
        return list(self.windows)

    async def open_window(self, url: str) -> FakeWindow:
        self.opened.append(url)
        return FakeWindow(url)


class FakeNotification:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def registration() -> FakeRegistration:
    return FakeRegistration()


@pytest.fixture
def created() -> list[FakeMessaging]:
    return []


@pytest.fixture
def relay(registration, created) -> ServiceWorkerRelay:
    def factory(config: dict) -> FakeMessaging:
        messaging = FakeMessaging(config)
        created.append(messaging)
        return messaging

    return ServiceWorkerRelay(registration, FakeClients([]), factory)


class TestConfigHandshake:

    def test_initializes_once(self, relay, created):
        message = {"type": FIREBASE_CONFIG_MESSAGE, "config": FIREBASE_CONFIG}

        assert relay.handle_message(message)
        assert not relay.handle_message(message)

        assert relay.is_initialized
        assert relay.config == FIREBASE_CONFIG
        assert len(created) == 1
        assert created[0].handler is not None

    @pytest.mark.parametrize("message", [
        None,
        {},
        {"type": "SKIP_WAITING"},
        {"type": FIREBASE_CONFIG_MESSAGE},
        {"type": FIREBASE_CONFIG_MESSAGE, "config": {}},
    ])
    def test_ignores_other_messages(self, relay, created, message):
        assert not relay.handle_message(message)
        assert not relay.is_initialized
        assert created == []


class TestBackgroundNotification:

    def test_defaults_when_payload_empty(self):
        shown = ServiceWorkerRelay.build_background_notification({})
        options = shown.options.to_dict()

        assert shown.title == "HealthTrackerAI"
        assert options["body"] == "You have a new notification"
        assert options["tag"] == "health-tracker-notification"
        assert options["vibrate"] == [200, 100, 200]
        assert [a["action"] for a in options["actions"]] == ["view", "dismiss"]
        assert options["requireInteraction"] is False

    def test_payload_fields_win(self):
        shown = ServiceWorkerRelay.build_background_notification({
            "notification": {"title": "Workout time", "body": "Leg day"},
            "data": {"tag": "admin-message"},
        })

        assert shown.title == "Workout time"
        assert shown.options.body == "Leg day"
        assert shown.options.tag == "admin-message"
        assert shown.options.data == {"tag": "admin-message"}

    def test_registered_handler_shows_notification(self, relay, registration, created):
        relay.handle_message({"type": FIREBASE_CONFIG_MESSAGE, "config": FIREBASE_CONFIG})

        asyncio.run(created[0].handler({"notification": {"title": "Hello", "body": "World"}}))

        assert registration.shown[0][0] == "Hello"
        assert registration.shown[0][1]["body"] == "World"


class TestNotificationClick:

    def test_dismiss_only_closes(self, registration):
        clients = FakeClients([FakeWindow("https://app.example/")])
        relay = ServiceWorkerRelay(registration, clients, FakeMessaging)
        notification = FakeNotification()

        assert asyncio.run(relay.handle_notification_click(notification, "dismiss")) is None
        assert notification.closed
        assert not clients.windows[0].focused
        assert clients.opened == []

    def test_focuses_existing_window(self, registration):
        other = FakeWindow("https://elsewhere.example")
        app_window = FakeWindow("https://app.example/dashboard")
        clients = FakeClients([other, app_window])
        relay = ServiceWorkerRelay(registration, clients, FakeMessaging, app_url="https://app.example")

        result = asyncio.run(relay.handle_notification_click(FakeNotification(), "view"))

        assert result is app_window
        assert app_window.focused
        assert clients.opened == []

    def test_opens_window_without_clients(self, registration):
        clients = FakeClients([])
        relay = ServiceWorkerRelay(registration, clients, FakeMessaging)
        notification = FakeNotification()

        asyncio.run(relay.handle_notification_click(notification))

        assert notification.closed
        assert clients.opened == ["/"]
