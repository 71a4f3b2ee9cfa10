"""
Browser Capability Detector

Classifies the client browser from user-agent/vendor substrings and
feature presence flags. Pure functions: no state, recomputed per call.
"""

import re

from healthtracker.domain.models.browser import (
    BrowserEnvironment,
    BrowserInfo,
    NotificationCapabilities,
    NotificationPermission,
)

_MOBILE_PATTERN = re.compile(r"Android|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)
_INSTALL_MOBILE_PATTERN = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE
)
_IOS_PATTERN = re.compile(r"iPad|iPhone|iPod")
# Safari without Chrome/Android anywhere before the "safari" token
_STANDALONE_SAFARI_PATTERN = re.compile(r"^((?!chrome|android).)*safari", re.IGNORECASE)

TABLET_MAX_WIDTH = 1024
TABLET_MAX_HEIGHT = 1366


def is_chrome(env: BrowserEnvironment) -> bool:
    """Google Chrome (not merely Chromium-based with a different vendor)."""
    return "Chrome" in env.user_agent and "Google Inc" in env.vendor


def is_ios(user_agent: str) -> bool:
    return bool(_IOS_PATTERN.search(user_agent))


def is_mobile_for_install(env: BrowserEnvironment, include_tablet_viewport: bool = False) -> bool:
    """
    Device class used by the install prompt.

    Args:
        env: Client environment
        include_tablet_viewport: Also treat viewports up to 1024x1366 as mobile
    """
    if _INSTALL_MOBILE_PATTERN.search(env.user_agent):
        return True
    if include_tablet_viewport and env.viewport_width is not None and env.viewport_height is not None:
        return env.viewport_width <= TABLET_MAX_WIDTH and env.viewport_height <= TABLET_MAX_HEIGHT
    return False


def is_running_standalone(env: BrowserEnvironment) -> bool:
    """
    Whether the page runs as an installed app.

    iOS Safari only exposes navigator.standalone; everyone else reports
    the display-mode media query.
    """
    if is_ios(env.user_agent) and _STANDALONE_SAFARI_PATTERN.search(env.user_agent):
        return env.navigator_standalone
    return env.display_mode_standalone


def is_push_notification_supported(env: BrowserEnvironment) -> bool:
    """Notification API, service workers and the Push API are all present."""
    return env.has_notification and env.has_service_worker and env.has_push_manager


def detect_browser(env: BrowserEnvironment) -> BrowserInfo:
    """
    Build a BrowserInfo snapshot.

    Args:
        env: Client environment

    Returns:
        Browser family and capability flags
    """
    ua = env.user_agent
    permission = (
        env.notification_permission
        if env.has_notification
        else NotificationPermission.UNSUPPORTED
    )

    return BrowserInfo(
        user_agent=ua,
        is_chrome=is_chrome(env),
        is_firefox="Firefox" in ua,
        is_safari="Safari" in ua and "Chrome" not in ua,
        is_edge="Edg" in ua,
        is_mobile=bool(_MOBILE_PATTERN.search(ua)),
        is_ios=is_ios(ua),
        supports_notifications=env.has_notification,
        supports_service_worker=env.has_service_worker,
        supports_push=env.has_push_manager,
        notification_permission=permission,
    )


def get_notification_capabilities(env: BrowserEnvironment) -> NotificationCapabilities:
    """Derive which push features are worth using. Safari gets the basic path."""
    info = detect_browser(env)
    return NotificationCapabilities(
        browser=info,
        supports_background_messages=info.supports_service_worker,
        supports_actions=not info.is_safari,
        supports_vibration=info.is_mobile,
        recommended_approach="basic" if info.is_safari else "advanced",
    )


def classify_device_type(user_agent: str) -> str:
    """Coarse device label shown in the admin panel."""
    if any(marker in user_agent for marker in ("Mobile", "Android", "iPhone")):
        return "Mobile"
    return "Desktop"
