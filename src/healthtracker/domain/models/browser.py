"""
Browser Environment Models

Value objects describing the client browser. `BrowserEnvironment` is
the raw input (what a page can read from `navigator`/`window`);
`BrowserInfo` and `NotificationCapabilities` are derived snapshots.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class NotificationPermission(StrEnum):
    """Notification permission states reported by the browser."""

    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class BrowserEnvironment:
    """
    Raw client environment.

    Attributes:
        user_agent: navigator.userAgent
        vendor: navigator.vendor
        has_notification: "Notification" in window
        has_service_worker: "serviceWorker" in navigator
        has_push_manager: "PushManager" in window
        notification_permission: Notification.permission when available
        display_mode_standalone: matchMedia("(display-mode: standalone)")
        navigator_standalone: iOS navigator.standalone
        viewport_width: window.innerWidth
        viewport_height: window.innerHeight
    """

    user_agent: str = ""
    vendor: str = ""
    has_notification: bool = False
    has_service_worker: bool = False
    has_push_manager: bool = False
    notification_permission: NotificationPermission = NotificationPermission.DEFAULT
    display_mode_standalone: bool = False
    navigator_standalone: bool = False
    viewport_width: Optional[int] = None
    viewport_height: Optional[int] = None


@dataclass(frozen=True)
class BrowserInfo:
    """Browser family and capability snapshot."""

    user_agent: str
    is_chrome: bool
    is_firefox: bool
    is_safari: bool
    is_edge: bool
    is_mobile: bool
    is_ios: bool
    supports_notifications: bool
    supports_service_worker: bool
    supports_push: bool
    notification_permission: NotificationPermission

    def to_dict(self) -> dict:
        return {
            "userAgent": self.user_agent,
            "isChrome": self.is_chrome,
            "isFirefox": self.is_firefox,
            "isSafari": self.is_safari,
            "isEdge": self.is_edge,
            "isMobile": self.is_mobile,
            "isIOS": self.is_ios,
            "supportsNotifications": self.supports_notifications,
            "supportsServiceWorker": self.supports_service_worker,
            "supportsPush": self.supports_push,
            "notificationPermission": self.notification_permission.value,
        }


@dataclass(frozen=True)
class NotificationCapabilities:
    """Push features usable in the current browser."""

    browser: BrowserInfo
    supports_background_messages: bool
    supports_actions: bool
    supports_vibration: bool
    recommended_approach: str

    def to_dict(self) -> dict:
        return {
            **self.browser.to_dict(),
            "supportsBackgroundMessages": self.supports_background_messages,
            "supportsActions": self.supports_actions,
            "supportsVibration": self.supports_vibration,
            "recommendedApproach": self.recommended_approach,
        }
