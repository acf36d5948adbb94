"""DeviceRepository Protocol."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_notify.domain.models import Device


class DeviceRepositoryProtocol(Protocol):
    async def list_other_devices(self, db: AsyncSession, user_id: str) -> list[Device]: ...

    async def upsert_device(self, db: AsyncSession, device: Device) -> None: ...
