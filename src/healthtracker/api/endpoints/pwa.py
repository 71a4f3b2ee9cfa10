"""
PWA Endpoints

Browser capability detection, install-prompt eligibility and the
Firebase config handed to the messaging service worker.
"""

from typing import Optional

from fastapi import APIRouter, Header
from pydantic import BaseModel, ConfigDict, Field

from healthtracker.config import get_settings
from healthtracker.domain.models.browser import BrowserEnvironment, NotificationPermission
from healthtracker.services.notifications import FIREBASE_CONFIG_MESSAGE
from healthtracker.services.pwa import (
    InMemoryPromptStorage,
    InstallPromptConfig,
    InstallPromptController,
    get_notification_capabilities,
    is_push_notification_supported,
)

router = APIRouter()


class BrowserInfoRequest(BaseModel):
    """What the page can read from navigator/window, plus its install-prompt storage."""

    model_config = ConfigDict(populate_by_name=True)

    user_agent: Optional[str] = Field(None, alias="userAgent")
    vendor: str = ""
    has_notification: bool = Field(False, alias="hasNotification")
    has_service_worker: bool = Field(False, alias="hasServiceWorker")
    has_push_manager: bool = Field(False, alias="hasPushManager")
    notification_permission: NotificationPermission = Field(
        NotificationPermission.DEFAULT, alias="notificationPermission"
    )
    display_mode_standalone: bool = Field(False, alias="displayModeStandalone")
    navigator_standalone: bool = Field(False, alias="navigatorStandalone")
    viewport_width: Optional[int] = Field(None, alias="viewportWidth", ge=0)
    viewport_height: Optional[int] = Field(None, alias="viewportHeight", ge=0)
    storage: dict[str, str] = Field(default_factory=dict)


@router.post("/browser-info", summary="Detect browser capabilities")
async def browser_info(
    request: BrowserInfoRequest,
    user_agent: Optional[str] = Header(None),
) -> dict:
    """
    Classify the client browser.

    The user agent defaults to the request's own header. When the client
    sends its install-prompt storage, the response also says whether the
    custom install banner may be offered.
    """
    env = BrowserEnvironment(
        user_agent=request.user_agent or user_agent or "",
        vendor=request.vendor,
        has_notification=request.has_notification,
        has_service_worker=request.has_service_worker,
        has_push_manager=request.has_push_manager,
        notification_permission=request.notification_permission,
        display_mode_standalone=request.display_mode_standalone,
        navigator_standalone=request.navigator_standalone,
        viewport_width=request.viewport_width,
        viewport_height=request.viewport_height,
    )
    capabilities = get_notification_capabilities(env)

    controller = InstallPromptController(
        env,
        InMemoryPromptStorage(request.storage),
        InstallPromptConfig.from_settings(get_settings().pwa),
    )
    reason = controller.suppression_reason()

    return {
        "browser": capabilities.browser.to_dict(),
        "capabilities": capabilities.to_dict(),
        "pushSupported": is_push_notification_supported(env),
        "installPrompt": {
            "isMobile": controller.is_mobile,
            "isStandalone": controller.is_standalone,
            "eligible": reason is None,
            "suppressedReason": reason.value if reason else None,
            "state": controller.state.to_dict(),
        },
    }


@router.get("/firebase-config", summary="Config message for the messaging service worker")
async def firebase_config() -> dict:
    settings = get_settings().firebase
    return {
        "type": FIREBASE_CONFIG_MESSAGE,
        "config": settings.web_config(),
        "vapidKey": settings.vapid_key,
    }
