"""
Admin User & Device Service

Admin panel operations over Firebase Auth users and their registered
push devices: listing, per-device notification switch and direct push
messages. Also handles device registration from signed-in clients.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from healthtracker.config.logging_config import get_logger
from healthtracker.domain.models.device import DeviceRegistration
from healthtracker.infrastructure.firebase.admin_client import FirebaseUser, PushDeliveryError
from healthtracker.infrastructure.metrics import track_push
from healthtracker.services.notifications.payloads import DEFAULT_TITLE
from healthtracker.services.pwa.browser_detector import classify_device_type

logger = get_logger(__name__)


class DeviceStore(Protocol):
    """Persistence used by the service (see DeviceRepository)."""

    async def list_for_users(self, user_ids: Sequence[str]) -> dict[str, list[DeviceRegistration]]:
        ...

    async def get_for_user(self, user_id: str, device_id: str) -> Optional[DeviceRegistration]:
        ...

    async def register(self, device: DeviceRegistration) -> DeviceRegistration:
        ...

    async def set_notifications_enabled(
        self, user_id: str, device_id: str, enabled: bool
    ) -> Optional[DeviceRegistration]:
        ...


class UserDirectory(Protocol):
    async def list_users(self) -> list[FirebaseUser]:
        ...


class PushSender(Protocol):
    async def send_push(
        self,
        registration_token: str,
        title: str,
        body: str,
        data: Optional[dict[str, str]] = None,
        link: Optional[str] = None,
    ) -> str:
        ...


class DeviceNotFoundError(Exception):
    def __init__(self, user_id: str, device_id: str) -> None:
        super().__init__("Device not found")
        self.user_id = user_id
        self.device_id = device_id


class NotificationsDisabledError(Exception):
    """The admin switched notifications off for this device."""

    def __init__(self) -> None:
        super().__init__("Notifications are disabled for this device")


@dataclass
class AdminUserView:
    """User row in the admin panel."""

    uid: str
    email: Optional[str]
    display_name: Optional[str]
    devices: list[DeviceRegistration] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "devices": [d.to_dict() for d in self.devices],
        }


class AdminUserService:
    """Users, devices and admin push messages."""

    def __init__(self, devices: DeviceStore, users: UserDirectory, push: PushSender) -> None:
        self._devices = devices
        self._users = users
        self._push = push

    async def list_users_with_devices(self) -> list[AdminUserView]:
        users = await self._users.list_users()
        devices = await self._devices.list_for_users([u.uid for u in users])
        logger.info("Admin user listing", users=len(users))
        return [
            AdminUserView(
                uid=u.uid,
                email=u.email,
                display_name=u.display_name,
                devices=devices.get(u.uid, []),
            )
            for u in users
        ]

    async def register_device(self, user_id: str, token: str, user_agent: str = "") -> DeviceRegistration:
        """Record (or refresh) the device a user enabled push on."""
        device = DeviceRegistration(
            user_id=user_id,
            token=token,
            user_agent=user_agent,
            device_type=classify_device_type(user_agent),
        )
        stored = await self._devices.register(device)
        logger.info("Device registered", user_id=user_id, device_id=stored.id, device_type=stored.device_type)
        return stored

    async def toggle_notifications(self, user_id: str, device_id: str, enabled: bool) -> DeviceRegistration:
        device = await self._devices.set_notifications_enabled(user_id, device_id, enabled)
        if device is None:
            raise DeviceNotFoundError(user_id, device_id)
        logger.info("Device notifications toggled", device_id=device_id, enabled=enabled)
        return device

    async def send_message(self, user_id: str, device_id: str, message: str) -> str:
        """
        Push an admin message to one device.

        Returns:
            FCM message id

        Raises:
            DeviceNotFoundError: Unknown device for this user
            NotificationsDisabledError: Device switched off
            PushDeliveryError: FCM rejected the message
        """
        device = await self._devices.get_for_user(user_id, device_id)
        if device is None:
            raise DeviceNotFoundError(user_id, device_id)
        if not device.notifications_enabled:
            track_push("disabled")
            raise NotificationsDisabledError()

        try:
            message_id = await self._push.send_push(
                device.token,
                DEFAULT_TITLE,
                message,
                data={"tag": "admin-message"},
            )
        except PushDeliveryError:
            track_push("failed")
            raise

        track_push("sent")
        return message_id
