"""Tests configuration and fixtures."""

import os

import pytest

from healthtracker.config import Settings
from healthtracker.domain.models.browser import BrowserEnvironment, NotificationPermission
from healthtracker.infrastructure.llm import LLMProviderError
from tests.fakes import FakeLLMProvider, FakeTicketStore
from tests.user_agents import CHROME_ANDROID_UA, DESKTOP_CHROME_UA, IPHONE_SAFARI_UA

# Keep settings deterministic regardless of the developer's .env
os.environ.setdefault("HEALTHTRACKER_ENV", "development")
os.environ.setdefault("HEALTHTRACKER_ADMIN_EMAIL", "admin@healthtracker.test")


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with mock values."""
    return Settings(
        env="development",
        debug=True,
        admin_email="admin@healthtracker.test",
    )


@pytest.fixture
def chrome_android_env() -> BrowserEnvironment:
    return BrowserEnvironment(
        user_agent=CHROME_ANDROID_UA,
        vendor="Google Inc.",
        has_notification=True,
        has_service_worker=True,
        has_push_manager=True,
        notification_permission=NotificationPermission.DEFAULT,
        viewport_width=412,
        viewport_height=915,
    )


@pytest.fixture
def iphone_env() -> BrowserEnvironment:
    return BrowserEnvironment(
        user_agent=IPHONE_SAFARI_UA,
        vendor="Apple Computer, Inc.",
        has_notification=True,
        has_service_worker=True,
        has_push_manager=True,
        viewport_width=390,
        viewport_height=844,
    )


@pytest.fixture
def desktop_chrome_env() -> BrowserEnvironment:
    return BrowserEnvironment(
        user_agent=DESKTOP_CHROME_UA,
        vendor="Google Inc.",
        has_notification=True,
        has_service_worker=True,
        has_push_manager=True,
        viewport_width=1920,
        viewport_height=1080,
    )


@pytest.fixture
def ticket_store() -> FakeTicketStore:
    return FakeTicketStore()


@pytest.fixture
def llm_provider() -> FakeLLMProvider:
    return FakeLLMProvider(content="Drink more water.")


@pytest.fixture
def failing_llm_provider() -> FakeLLMProvider:
    return FakeLLMProvider(error=LLMProviderError("upstream exploded", provider="fake"))
