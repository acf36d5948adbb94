"""DeviceRepository — raw SQL persistence for the devices table."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_notify.domain.models import Device

_LIST_OTHER_DEVICES_SQL = text("""
    SELECT push_token, user_id, background_alerts_enabled, foreground_alerts_enabled
    FROM devices
    WHERE user_id <> :user_id
""")

_UPSERT_DEVICE_SQL = text("""
    INSERT INTO devices (
        push_token, user_id, background_alerts_enabled, foreground_alerts_enabled
    ) VALUES (
        :push_token, :user_id, :background_alerts_enabled, :foreground_alerts_enabled
    )
    ON CONFLICT (push_token) DO UPDATE
    SET user_id = EXCLUDED.user_id,
        background_alerts_enabled = EXCLUDED.background_alerts_enabled,
        foreground_alerts_enabled = EXCLUDED.foreground_alerts_enabled
""")


def _row_to_device(row: Any) -> Device:
    return Device(
        push_token=row.push_token,
        user_id=row.user_id,
        background_alerts_enabled=row.background_alerts_enabled,
        foreground_alerts_enabled=row.foreground_alerts_enabled,
    )


class DeviceRepository:
    async def list_other_devices(self, db: AsyncSession, user_id: str) -> list[Device]:
        rows = (await db.execute(_LIST_OTHER_DEVICES_SQL, {"user_id": user_id})).fetchall()
        return [_row_to_device(row) for row in rows]

    async def upsert_device(self, db: AsyncSession, device: Device) -> None:
        await db.execute(
            _UPSERT_DEVICE_SQL,
            {
                "push_token": device.push_token,
                "user_id": device.user_id,
                "background_alerts_enabled": device.background_alerts_enabled,
                "foreground_alerts_enabled": device.foreground_alerts_enabled,
            },
        )
