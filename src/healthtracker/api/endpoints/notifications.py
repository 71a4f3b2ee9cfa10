"""
Notification Endpoints

Signed-in clients register the FCM token of the device they enabled
push notifications on.
"""

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel, ConfigDict, Field

from healthtracker.api.dependencies import get_admin_user_service, get_current_claims
from healthtracker.services.admin import AdminUserService

router = APIRouter()


class RegisterDeviceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1, max_length=4096, description="FCM registration token")
    user_agent: str = Field("", alias="userAgent", max_length=1024)


@router.post("/devices", status_code=status.HTTP_201_CREATED, summary="Register a push device")
async def register_device(
    request: RegisterDeviceRequest,
    claims: dict = Depends(get_current_claims),
    user_agent: str = Header(""),
    service: AdminUserService = Depends(get_admin_user_service),
) -> dict:
    device = await service.register_device(
        claims["uid"],
        request.token,
        request.user_agent or user_agent,
    )
    return {"success": True, "device": device.to_dict()}
