# src/tm_queue/domain/repository.py
"""QueueRepository Protocol — interface contract for persistence layer."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_queue.domain.models import QueueEntry


class QueueRepositoryProtocol(Protocol):
    async def get_entry(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> QueueEntry | None: ...

    async def find_oldest_partner(
        self, db: AsyncSession, user_id: str, joined_after: datetime
    ) -> QueueEntry | None: ...

    async def upsert_entry(self, db: AsyncSession, entry: QueueEntry) -> None: ...

    async def delete_entries(self, db: AsyncSession, user_ids: list[str]) -> int: ...
