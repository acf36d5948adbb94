"""Pydantic request/response schemas for tm_notify."""

from pydantic import BaseModel, Field

from src.tm_notify.domain.models import Device


class RegisterDeviceRequest(BaseModel):
    push_token: str = Field(..., max_length=4096)
    background_alerts_enabled: bool | None = None
    foreground_alerts_enabled: bool | None = None


class DeviceResponse(BaseModel):
    push_token: str
    user_id: str
    background_alerts_enabled: bool | None
    foreground_alerts_enabled: bool | None

    @classmethod
    def from_domain(cls, d: Device) -> "DeviceResponse":
        return cls(
            push_token=d.push_token,
            user_id=d.user_id,
            background_alerts_enabled=d.background_alerts_enabled,
            foreground_alerts_enabled=d.foreground_alerts_enabled,
        )
