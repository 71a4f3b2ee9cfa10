"""
Unit Tests for Admin User Service

Tests device listing, registration, the notification switch and pushes.
"""

import asyncio

import pytest

from healthtracker.infrastructure.firebase import FirebaseUser, PushDeliveryError
from healthtracker.services.admin import (
    AdminUserService,
    DeviceNotFoundError,
    NotificationsDisabledError,
)
from tests.fakes import FakeDeviceStore, FakeFirebase
from tests.user_agents import DESKTOP_FIREFOX_UA, IPHONE_SAFARI_UA


@pytest.fixture
def devices() -> FakeDeviceStore:
    return FakeDeviceStore()


@pytest.fixture
def firebase() -> FakeFirebase:
    return FakeFirebase([
        FirebaseUser(uid="uid-alice", email="alice@example.com", display_name="Alice"),
        FirebaseUser(uid="uid-bob", email="bob@example.com"),
    ])


@pytest.fixture
def service(devices, firebase) -> AdminUserService:
    return AdminUserService(devices, firebase, firebase)


class TestRegisterDevice:

    def test_classifies_device(self, service):
        phone = asyncio.run(service.register_device("uid-alice", "tok-1", IPHONE_SAFARI_UA))
        laptop = asyncio.run(service.register_device("uid-alice", "tok-2", DESKTOP_FIREFOX_UA))

        assert phone.device_type == "Mobile"
        assert laptop.device_type == "Desktop"
        assert phone.notifications_enabled

    def test_same_token_refreshes(self, service, devices):
        first = asyncio.run(service.register_device("uid-alice", "tok-1", "old"))
        second = asyncio.run(service.register_device("uid-alice", "tok-1", "new"))

        assert second.id == first.id
        assert len(devices.devices) == 1


class TestListUsers:

    def test_users_with_devices(self, service):
        asyncio.run(service.register_device("uid-alice", "tok-1", IPHONE_SAFARI_UA))

        users = asyncio.run(service.list_users_with_devices())
        by_uid = {u.uid: u.to_dict() for u in users}

        assert by_uid["uid-alice"]["displayName"] == "Alice"
        assert len(by_uid["uid-alice"]["devices"]) == 1
        assert "token" not in by_uid["uid-alice"]["devices"][0]
        assert by_uid["uid-bob"]["devices"] == []


class TestNotifications:

    def test_toggle(self, service):
        device = asyncio.run(service.register_device("uid-alice", "tok-1"))

        updated = asyncio.run(service.toggle_notifications("uid-alice", device.id, False))

        assert not updated.notifications_enabled

    def test_toggle_unknown_device(self, service):
        with pytest.raises(DeviceNotFoundError):
            asyncio.run(service.toggle_notifications("uid-alice", "missing", True))

    def test_toggle_other_users_device(self, service):
        device = asyncio.run(service.register_device("uid-alice", "tok-1"))

        with pytest.raises(DeviceNotFoundError):
            asyncio.run(service.toggle_notifications("uid-bob", device.id, False))

    def test_send_message(self, service, firebase):
        device = asyncio.run(service.register_device("uid-alice", "tok-1"))

        message_id = asyncio.run(service.send_message("uid-alice", device.id, "Great week!"))

        assert message_id == "projects/test/messages/1"
        assert firebase.pushes == [{
            "token": "tok-1",
            "title": "HealthTrackerAI",
            "body": "Great week!",
            "data": {"tag": "admin-message"},
        }]

    def test_send_to_disabled_device(self, service, firebase):
        device = asyncio.run(service.register_device("uid-alice", "tok-1"))
        asyncio.run(service.toggle_notifications("uid-alice", device.id, False))

        with pytest.raises(NotificationsDisabledError):
            asyncio.run(service.send_message("uid-alice", device.id, "hello"))
        assert firebase.pushes == []

    def test_send_to_unknown_device(self, service):
        with pytest.raises(DeviceNotFoundError):
            asyncio.run(service.send_message("uid-alice", "missing", "hello"))

    def test_fcm_failure_propagates(self, devices):
        firebase = FakeFirebase([], push_error=PushDeliveryError("registration-token-not-registered"))
        service = AdminUserService(devices, firebase, firebase)
        device = asyncio.run(service.register_device("uid-alice", "tok-1"))

        with pytest.raises(PushDeliveryError):
            asyncio.run(service.send_message("uid-alice", device.id, "hello"))
