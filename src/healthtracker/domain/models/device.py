"""
Device Registration Model

A browser/device on which a user enabled push notifications.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from healthtracker.domain.models.ticket import utc_now


@dataclass
class DeviceRegistration:
    """
    Push-enabled device belonging to a user.

    Attributes:
        user_id: Firebase uid of the owner
        token: FCM registration token
        user_agent: User agent reported at registration
        device_type: "Mobile" or "Desktop"
        notifications_enabled: Admin-controlled delivery switch
        last_login: Last time the device re-registered
    """

    user_id: str
    token: str
    user_agent: str = ""
    device_type: str = "Desktop"
    notifications_enabled: bool = True
    id: str = field(default_factory=lambda: str(uuid4()))
    last_login: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Serialize for the admin panel (token omitted)."""
        return {
            "id": self.id,
            "userAgent": self.user_agent,
            "lastLogin": self.last_login.isoformat(),
            "notificationsEnabled": self.notifications_enabled,
            "deviceType": self.device_type,
        }
