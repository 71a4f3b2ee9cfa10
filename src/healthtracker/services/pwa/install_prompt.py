"""
PWA Install-Prompt Controller

Decides whether to replace the browser's native "add to home screen"
banner with the app's own call-to-action, and throttles that banner
using a persisted dismissal counter.

One controller serves every page; thresholds and storage keys come
from InstallPromptConfig. Storage is injected so the same policy runs
against browser localStorage, a server-side store or memory.

State rules:
1. Installed (flag or standalone display) -> never intercept, never render
2. Dismissal count >= max_dismissals -> never intercept, never render
3. Previously dismissed (when suppress_after_dismiss) -> same
4. Not a mobile device (when require_mobile) -> leave the native banner
5. Chrome -> hold the banner until the user interacts with the page
"""

from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import Optional, Protocol

from healthtracker.config.logging_config import get_logger
from healthtracker.config.settings import InstallPromptSettings
from healthtracker.domain.models.browser import BrowserEnvironment
from healthtracker.services.pwa.browser_detector import (
    is_chrome,
    is_mobile_for_install,
    is_running_standalone,
)
from healthtracker.services.pwa.prompt_storage import PromptStorage

logger = get_logger(__name__)


class InstallOutcome(StrEnum):
    """User's answer to the native install dialog."""

    ACCEPTED = "accepted"
    DISMISSED = "dismissed"


@dataclass(frozen=True)
class UserChoice:
    """Resolved value of BeforeInstallPromptEvent.userChoice."""

    outcome: InstallOutcome
    platform: str = ""


class DeferredInstallPrompt(Protocol):
    """The platform's deferred "before install" event."""

    def prevent_default(self) -> None:
        ...

    async def prompt(self) -> None:
        ...

    async def user_choice(self) -> UserChoice:
        ...


class InstallPromptError(Exception):
    """The deferred prompt failed while being shown."""


class PromptSuppressionReason(Enum):
    """Why the custom banner is not offered."""

    ALREADY_INSTALLED = "already_installed"
    DISMISS_LIMIT_REACHED = "dismiss_limit_reached"
    PREVIOUSLY_DISMISSED = "previously_dismissed"
    NOT_MOBILE = "not_mobile"


@dataclass(frozen=True)
class InstallPromptConfig:
    """
    Install-prompt policy configuration.

    Attributes:
        max_dismissals: Dismissals after which the banner is gone for good
        dismissed_key: Storage key of the "dismissed" flag
        installed_key: Storage key of the "installed" flag
        dismiss_count_key: Storage key of the dismissal counter
        suppress_after_dismiss: A single dismissal hides the banner
        require_mobile: Only intercept on mobile devices
        wait_for_interaction_on_chrome: Chrome needs a user gesture first
        treat_tablet_viewport_as_mobile: Small viewports count as mobile
    """

    max_dismissals: int = 3
    dismissed_key: str = "pwa-install-dismissed"
    installed_key: str = "pwa-installed"
    dismiss_count_key: str = "pwa-dismiss-count"
    suppress_after_dismiss: bool = True
    require_mobile: bool = True
    wait_for_interaction_on_chrome: bool = True
    treat_tablet_viewport_as_mobile: bool = False

    @classmethod
    def from_settings(cls, settings: InstallPromptSettings) -> "InstallPromptConfig":
        return cls(
            max_dismissals=settings.max_dismissals,
            dismissed_key=settings.dismissed_key,
            installed_key=settings.installed_key,
            dismiss_count_key=settings.dismiss_count_key,
            suppress_after_dismiss=settings.suppress_after_dismiss,
            require_mobile=settings.require_mobile,
            wait_for_interaction_on_chrome=settings.wait_for_interaction_on_chrome,
            treat_tablet_viewport_as_mobile=settings.treat_tablet_viewport_as_mobile,
        )


@dataclass
class InstallPromptState:
    """Current controller state."""

    deferred_event: Optional[DeferredInstallPrompt] = None
    show_prompt: bool = False
    is_installed: bool = False
    dismiss_count: int = 0
    is_dismissed: bool = False
    user_interacted: bool = False
    awaiting_interaction: bool = False

    def to_dict(self) -> dict:
        return {
            "hasDeferredEvent": self.deferred_event is not None,
            "showPrompt": self.show_prompt,
            "isInstalled": self.is_installed,
            "dismissCount": self.dismiss_count,
            "isDismissed": self.is_dismissed,
            "awaitingInteraction": self.awaiting_interaction,
        }


def _read_flag(value: Optional[str]) -> bool:
    # Older clients stored a dismissal timestamp instead of "true"
    return value is not None and value.strip().lower() not in ("", "false", "0")


def _read_count(value: Optional[str]) -> int:
    if value is None:
        return 0
    try:
        return max(int(value.strip()), 0)
    except ValueError:
        return 0


@dataclass
class InstallPromptController:
    """
    Install-prompt controller for one client.

    Usage:
        controller = InstallPromptController(env, storage)
        if controller.handle_before_install_prompt(event):
            ...  # native banner suppressed, ours may show
        if controller.should_render():
            ...  # render the banner
        await controller.install()
    """

    environment: BrowserEnvironment
    storage: PromptStorage
    config: InstallPromptConfig = field(default_factory=InstallPromptConfig)
    state: InstallPromptState = field(init=False)

    def __post_init__(self) -> None:
        self.state = InstallPromptState()
        self.refresh()

    # ------------------------------------------------------------------
    # Derived environment facts
    # ------------------------------------------------------------------

    @property
    def is_mobile(self) -> bool:
        return is_mobile_for_install(
            self.environment,
            include_tablet_viewport=self.config.treat_tablet_viewport_as_mobile,
        )

    @property
    def is_standalone(self) -> bool:
        return is_running_standalone(self.environment)

    def refresh(self) -> None:
        """Re-read persisted flags and display mode."""
        cfg = self.config
        self.state.dismiss_count = _read_count(self.storage.get_item(cfg.dismiss_count_key))
        self.state.is_dismissed = _read_flag(self.storage.get_item(cfg.dismissed_key))
        installed_flag = self.storage.get_item(cfg.installed_key) == "true"
        self.state.is_installed = installed_flag or self.is_standalone

    def suppression_reason(self) -> Optional[PromptSuppressionReason]:
        """First rule that keeps the custom banner away, or None."""
        if self.state.is_installed:
            return PromptSuppressionReason.ALREADY_INSTALLED
        if self.state.dismiss_count >= self.config.max_dismissals:
            return PromptSuppressionReason.DISMISS_LIMIT_REACHED
        if self.config.suppress_after_dismiss and self.state.is_dismissed:
            return PromptSuppressionReason.PREVIOUSLY_DISMISSED
        if self.config.require_mobile and not self.is_mobile:
            return PromptSuppressionReason.NOT_MOBILE
        return None

    # ------------------------------------------------------------------
    # Platform events
    # ------------------------------------------------------------------

    def handle_before_install_prompt(self, event: DeferredInstallPrompt) -> bool:
        """
        Handle the platform's "before install" signal.

        Args:
            event: Deferred install event

        Returns:
            True if the native banner was suppressed and the event deferred
        """
        reason = self.suppression_reason()
        if reason is not None:
            logger.debug("Native install banner left alone", reason=reason.value)
            return False

        event.prevent_default()
        self.state.deferred_event = event

        if (
            self.config.wait_for_interaction_on_chrome
            and is_chrome(self.environment)
            and not self.state.user_interacted
        ):
            self.state.awaiting_interaction = True
        else:
            self.state.show_prompt = True

        return True

    def handle_user_interaction(self) -> None:
        """Record a click/touch; releases a banner held for Chrome."""
        self.state.user_interacted = True
        if self.state.awaiting_interaction and self.state.deferred_event is not None:
            self.state.awaiting_interaction = False
            self.state.show_prompt = True

    def handle_app_installed(self) -> None:
        """The platform reports the app was installed."""
        self.storage.set_item(self.config.installed_key, "true")
        self.state.is_installed = True
        self._reset_prompt()

    # ------------------------------------------------------------------
    # Banner actions
    # ------------------------------------------------------------------

    async def install(self) -> Optional[InstallOutcome]:
        """
        Show the native install dialog from the deferred event.

        Returns:
            The user's outcome, or None without a deferred event

        Raises:
            InstallPromptError: If the platform fails to show the dialog
        """
        event = self.state.deferred_event
        if event is None:
            return None

        try:
            await event.prompt()
            choice = await event.user_choice()
        except Exception as e:
            logger.error("Install prompt failed", error=str(e))
            raise InstallPromptError(str(e)) from e
        finally:
            self._reset_prompt()

        if choice.outcome == InstallOutcome.ACCEPTED:
            self.storage.set_item(self.config.installed_key, "true")
            self.state.is_installed = True
            logger.info("Install prompt accepted", platform=choice.platform)
        else:
            logger.info("Install prompt dismissed", platform=choice.platform)

        return choice.outcome

    def dismiss(self) -> int:
        """
        Hide the banner and count the dismissal.

        Returns:
            New dismissal count
        """
        self.state.show_prompt = False
        count = _read_count(self.storage.get_item(self.config.dismiss_count_key)) + 1
        self.storage.set_item(self.config.dismiss_count_key, str(count))
        self.storage.set_item(self.config.dismissed_key, "true")
        self.state.dismiss_count = count
        self.state.is_dismissed = True
        return count

    def should_render(self) -> bool:
        """Whether the custom banner is visible right now."""
        return self.state.show_prompt and self.suppression_reason() is None

    def _reset_prompt(self) -> None:
        self.state.deferred_event = None
        self.state.show_prompt = False
        self.state.awaiting_interaction = False
