"""tm_notify REST endpoints.

PUT /devices — register or update the caller's device and alert preferences
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import get_db_session
from src.tm_common.errors import InvalidPushTokenError
from src.tm_common.response import ApiResponse, success_response
from src.tm_gateway.auth.dependencies import get_current_user_id
from src.tm_notify.application.schemas import DeviceResponse, RegisterDeviceRequest
from src.tm_notify.application.service import NotificationService, get_notification_service
from src.tm_notify.domain.models import Device

router = APIRouter(prefix="/devices", tags=["devices"])


@router.put("")
async def register_device(
    body: RegisterDeviceRequest,
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> ApiResponse:
    token = body.push_token.strip()
    if not token:
        raise InvalidPushTokenError()
    device = Device(
        push_token=token,
        user_id=user_id,
        background_alerts_enabled=body.background_alerts_enabled,
        foreground_alerts_enabled=body.foreground_alerts_enabled,
    )
    await service.register_device(db, device)
    return success_response(DeviceResponse.from_domain(device).model_dump(), request)
