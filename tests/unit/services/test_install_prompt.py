"""
Unit Tests for Install-Prompt Controller

Tests banner suppression, the dismissal counter and the install flow.
"""

import asyncio
from dataclasses import replace

import pytest

from healthtracker.services.pwa.install_prompt import (
    InstallOutcome,
    InstallPromptConfig,
    InstallPromptController,
    InstallPromptError,
    PromptSuppressionReason,
    UserChoice,
)
from healthtracker.services.pwa.prompt_storage import InMemoryPromptStorage


class FakeInstallEvent:
    """Deferred install event with a scripted outcome."""

    def __init__(self, outcome: InstallOutcome = InstallOutcome.ACCEPTED, fail: bool = False) -> None:
        self.outcome = outcome
        self.fail = fail
        self.default_prevented = False
        self.prompted = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    async def prompt(self) -> None:
        if self.fail:
            raise RuntimeError("prompt() can only be called once")
        self.prompted = True

    async def user_choice(self) -> UserChoice:
        return UserChoice(outcome=self.outcome, platform="web")


@pytest.fixture
def storage() -> InMemoryPromptStorage:
    return InMemoryPromptStorage()


@pytest.fixture
def controller(chrome_android_env, storage) -> InstallPromptController:
    config = InstallPromptConfig(wait_for_interaction_on_chrome=False)
    return InstallPromptController(chrome_android_env, storage, config)


class TestSuppression:
    """Rules that keep the custom banner away."""

    def test_dismiss_limit_never_renders(self, chrome_android_env):
        """Three dismissals hide the banner for good, even with the flag cleared."""
        storage = InMemoryPromptStorage({"pwa-dismiss-count": "3"})
        config = InstallPromptConfig(suppress_after_dismiss=False, wait_for_interaction_on_chrome=False)
        controller = InstallPromptController(chrome_android_env, storage, config)
        event = FakeInstallEvent()

        assert controller.handle_before_install_prompt(event) is False
        assert not event.default_prevented
        assert not controller.should_render()
        assert controller.suppression_reason() == PromptSuppressionReason.DISMISS_LIMIT_REACHED

    def test_installed_flag_never_renders(self, chrome_android_env):
        storage = InMemoryPromptStorage({"pwa-installed": "true"})
        controller = InstallPromptController(chrome_android_env, storage)

        assert controller.handle_before_install_prompt(FakeInstallEvent()) is False
        assert not controller.should_render()
        assert controller.suppression_reason() == PromptSuppressionReason.ALREADY_INSTALLED

    def test_standalone_counts_as_installed(self, chrome_android_env, storage):
        env = replace(chrome_android_env, display_mode_standalone=True)
        controller = InstallPromptController(env, storage)

        assert controller.state.is_installed
        assert not controller.handle_before_install_prompt(FakeInstallEvent())

    def test_previous_dismissal_suppresses(self, chrome_android_env):
        storage = InMemoryPromptStorage({"pwa-install-dismissed": "true", "pwa-dismiss-count": "1"})
        controller = InstallPromptController(chrome_android_env, storage)

        assert controller.suppression_reason() == PromptSuppressionReason.PREVIOUSLY_DISMISSED

    def test_legacy_timestamp_counts_as_dismissed(self, chrome_android_env):
        storage = InMemoryPromptStorage({"pwa-install-dismissed": "1715000000000"})
        controller = InstallPromptController(chrome_android_env, storage)

        assert controller.state.is_dismissed

    def test_single_dismissal_allowed_when_not_suppressing(self, chrome_android_env):
        storage = InMemoryPromptStorage({"pwa-install-dismissed": "true", "pwa-dismiss-count": "2"})
        config = InstallPromptConfig(suppress_after_dismiss=False, wait_for_interaction_on_chrome=False)
        controller = InstallPromptController(chrome_android_env, storage, config)

        assert controller.handle_before_install_prompt(FakeInstallEvent())
        assert controller.should_render()

    def test_desktop_leaves_native_banner(self, desktop_chrome_env, storage):
        controller = InstallPromptController(desktop_chrome_env, storage)
        event = FakeInstallEvent()

        assert not controller.handle_before_install_prompt(event)
        assert not event.default_prevented
        assert controller.suppression_reason() == PromptSuppressionReason.NOT_MOBILE

    def test_garbage_count_reads_as_zero(self, chrome_android_env):
        storage = InMemoryPromptStorage({"pwa-dismiss-count": "lots"})
        controller = InstallPromptController(chrome_android_env, storage)

        assert controller.state.dismiss_count == 0


class TestBeforeInstallPrompt:

    def test_eligible_mobile_defers_event(self, controller):
        event = FakeInstallEvent()

        assert controller.handle_before_install_prompt(event)
        assert event.default_prevented
        assert controller.state.deferred_event is event
        assert controller.should_render()

    def test_chrome_waits_for_interaction(self, chrome_android_env, storage):
        controller = InstallPromptController(chrome_android_env, storage)

        assert controller.handle_before_install_prompt(FakeInstallEvent())
        assert controller.state.awaiting_interaction
        assert not controller.should_render()

        controller.handle_user_interaction()

        assert controller.should_render()

    def test_prior_interaction_shows_immediately(self, chrome_android_env, storage):
        controller = InstallPromptController(chrome_android_env, storage)
        controller.handle_user_interaction()

        controller.handle_before_install_prompt(FakeInstallEvent())

        assert controller.should_render()

    def test_non_chrome_mobile_shows_immediately(self, iphone_env, storage):
        controller = InstallPromptController(iphone_env, storage)

        assert controller.handle_before_install_prompt(FakeInstallEvent())
        assert controller.should_render()


class TestDismiss:

    def test_dismiss_counts_and_hides(self, controller, storage):
        controller.handle_before_install_prompt(FakeInstallEvent())

        assert controller.dismiss() == 1
        assert not controller.should_render()
        assert storage.get_item("pwa-dismiss-count") == "1"
        assert storage.get_item("pwa-install-dismissed") == "true"

    def test_third_dismissal_reaches_limit(self, chrome_android_env, storage):
        config = InstallPromptConfig(suppress_after_dismiss=False, wait_for_interaction_on_chrome=False)
        controller = InstallPromptController(chrome_android_env, storage, config)

        for _ in range(3):
            controller.handle_before_install_prompt(FakeInstallEvent())
            controller.dismiss()

        assert controller.state.dismiss_count == 3
        assert not controller.handle_before_install_prompt(FakeInstallEvent())
        assert not controller.should_render()


class TestInstall:

    def test_accepted_install_is_permanent(self, controller, storage, chrome_android_env):
        controller.handle_before_install_prompt(FakeInstallEvent(InstallOutcome.ACCEPTED))

        outcome = asyncio.run(controller.install())

        assert outcome == InstallOutcome.ACCEPTED
        assert storage.get_item("pwa-installed") == "true"
        assert controller.state.is_installed
        assert not controller.should_render()

        # A fresh page load keeps the banner away
        reloaded = InstallPromptController(chrome_android_env, storage, controller.config)
        assert not reloaded.handle_before_install_prompt(FakeInstallEvent())
        assert not reloaded.should_render()

    def test_dismissed_install_clears_prompt(self, controller, storage):
        controller.handle_before_install_prompt(FakeInstallEvent(InstallOutcome.DISMISSED))

        outcome = asyncio.run(controller.install())

        assert outcome == InstallOutcome.DISMISSED
        assert storage.get_item("pwa-installed") is None
        assert controller.state.deferred_event is None
        assert not controller.should_render()

    def test_install_without_event_is_noop(self, controller):
        assert asyncio.run(controller.install()) is None

    def test_prompt_failure_raises_and_resets(self, controller):
        controller.handle_before_install_prompt(FakeInstallEvent(fail=True))

        with pytest.raises(InstallPromptError):
            asyncio.run(controller.install())

        assert controller.state.deferred_event is None
        assert not controller.state.show_prompt

    def test_app_installed_event(self, controller, storage):
        controller.handle_before_install_prompt(FakeInstallEvent())

        controller.handle_app_installed()

        assert storage.get_item("pwa-installed") == "true"
        assert not controller.should_render()
