"""
Admin Endpoints

SMS to users, the user/device list, per-device notification switch and
direct push messages. Every route requires the admin's Firebase ID token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from healthtracker.api.dependencies import (
    get_admin_user_service,
    get_sms_service,
    require_admin,
)
from healthtracker.config.logging_config import get_logger
from healthtracker.infrastructure.firebase import FirebaseNotConfiguredError, PushDeliveryError
from healthtracker.services.admin import (
    AdminUserService,
    DeviceNotFoundError,
    NotificationsDisabledError,
    SmsRequestError,
    SmsService,
)

logger = get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


class SendSmsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    message: Optional[str] = None


class SendSmsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    message_sid: str = Field(..., serialization_alias="messageSid")
    status: Optional[str] = None


class ToggleNotificationsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    device_id: str = Field(..., alias="deviceId", min_length=1)
    enabled: bool


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    device_id: str = Field(..., alias="deviceId", min_length=1)
    message: str = Field(..., min_length=1, max_length=1000)


def _firebase_unavailable(e: FirebaseNotConfiguredError) -> HTTPException:
    logger.error("Firebase Admin unavailable", error=str(e))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Firebase Admin SDK not properly configured",
    )


@router.post(
    "/send-sms",
    response_model=SendSmsResponse,
    response_model_by_alias=True,
    summary="Send an SMS to a user",
)
async def send_sms(
    request: SendSmsRequest,
    service: SmsService = Depends(get_sms_service),
) -> SendSmsResponse:
    """
    Send an SMS to a user's verified phone number.

    The phone number in the request must match the one on the user's
    Firebase account. Messages are limited to 160 characters.
    """
    try:
        receipt = await service.send_to_user(request.user_id, request.phone_number, request.message)
    except SmsRequestError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    except FirebaseNotConfiguredError as e:
        raise _firebase_unavailable(e) from e

    return SendSmsResponse(
        success=True,
        message="SMS sent successfully!",
        message_sid=receipt.sid,
        status=receipt.status,
    )


@router.get("/users", summary="List users with their devices")
async def list_users(
    service: AdminUserService = Depends(get_admin_user_service),
) -> dict:
    try:
        users = await service.list_users_with_devices()
    except FirebaseNotConfiguredError as e:
        raise _firebase_unavailable(e) from e
    return {"users": [u.to_dict() for u in users]}


@router.post("/toggle-notifications", summary="Enable or disable pushes for a device")
async def toggle_notifications(
    request: ToggleNotificationsRequest,
    service: AdminUserService = Depends(get_admin_user_service),
) -> dict:
    try:
        device = await service.toggle_notifications(request.user_id, request.device_id, request.enabled)
    except DeviceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"success": True, "device": device.to_dict()}


@router.post("/send-message", summary="Push a message to one device")
async def send_message(
    request: SendMessageRequest,
    service: AdminUserService = Depends(get_admin_user_service),
) -> dict:
    try:
        message_id = await service.send_message(request.user_id, request.device_id, request.message)
    except DeviceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except NotificationsDisabledError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except FirebaseNotConfiguredError as e:
        raise _firebase_unavailable(e) from e
    except PushDeliveryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to send notification", "details": str(e)},
        ) from e

    return {"success": True, "messageId": message_id}
