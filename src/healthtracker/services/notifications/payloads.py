"""
Notification Payloads

Value objects for web notifications: what the app asks to show
(NotificationPayload) and the options handed to showNotification /
the Notification constructor (NotificationOptions).
"""

from dataclasses import dataclass, field
from typing import Any, Optional

DEFAULT_ICON = "/favicon.ico"
DEFAULT_TITLE = "HealthTrackerAI"
DEFAULT_BODY = "You have a new notification"
DEFAULT_TAG = "health-tracker-notification"
TEST_TAG = "test-notification"

STANDARD_VIBRATION = [200, 100, 200]
IOS_VIBRATION = [100, 50, 100]


@dataclass(frozen=True)
class NotificationAction:
    """Button shown on a notification."""

    action: str
    title: str
    icon: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"action": self.action, "title": self.title}
        if self.icon:
            data["icon"] = self.icon
        return data


VIEW_ACTION = NotificationAction(action="view", title="View", icon=DEFAULT_ICON)
DISMISS_ACTION = NotificationAction(action="dismiss", title="Dismiss")


@dataclass
class NotificationPayload:
    """Notification requested by application code."""

    title: str
    body: str
    icon: Optional[str] = None
    badge: Optional[str] = None
    tag: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    require_interaction: bool = False
    silent: bool = False


@dataclass
class NotificationOptions:
    """
    Options passed to the platform when showing a notification.

    Serialized with the platform's camelCase names.
    """

    body: str
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_ICON
    tag: str = DEFAULT_TAG
    data: Optional[dict[str, Any]] = None
    require_interaction: bool = False
    silent: bool = False
    vibrate: Optional[list[int]] = None
    actions: Optional[list[NotificationAction]] = None

    def to_dict(self) -> dict:
        options: dict[str, Any] = {
            "body": self.body,
            "icon": self.icon,
            "badge": self.badge,
            "tag": self.tag,
            "data": self.data,
            "requireInteraction": self.require_interaction,
            "silent": self.silent,
        }
        if self.vibrate is not None:
            options["vibrate"] = list(self.vibrate)
        if self.actions is not None:
            options["actions"] = [a.to_dict() for a in self.actions]
        return options


@dataclass
class ShownNotification:
    """A notification as handed to the platform."""

    title: str
    options: NotificationOptions = field(default_factory=lambda: NotificationOptions(body=DEFAULT_BODY))
