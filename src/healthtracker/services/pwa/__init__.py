"""PWA policy services: browser detection and the install prompt."""

from healthtracker.services.pwa.browser_detector import (
    classify_device_type,
    detect_browser,
    get_notification_capabilities,
    is_push_notification_supported,
)
from healthtracker.services.pwa.install_prompt import (
    InstallOutcome,
    InstallPromptConfig,
    InstallPromptController,
    InstallPromptError,
    InstallPromptState,
    UserChoice,
)
from healthtracker.services.pwa.prompt_storage import InMemoryPromptStorage, PromptStorage

__all__ = [
    "classify_device_type",
    "detect_browser",
    "get_notification_capabilities",
    "is_push_notification_supported",
    "InstallOutcome",
    "InstallPromptConfig",
    "InstallPromptController",
    "InstallPromptError",
    "InstallPromptState",
    "UserChoice",
    "InMemoryPromptStorage",
    "PromptStorage",
]
