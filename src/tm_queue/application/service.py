"""QueueApplicationService — the player's own queue entry.

Join and leave are single-row writes on the caller's entry; they use the
request session with an explicit commit. Pairing itself is not triggered
from here: it runs when the queue-entry-changed event is delivered.
"""

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.datetime_utils import utc_now
from src.tm_common.errors import QueueEntryNotFoundError
from src.tm_queue.application.schemas import (
    JoinQueueRequest,
    LeaveQueueResponse,
    QueueEntryResponse,
)
from src.tm_queue.domain.models import QueueEntry
from src.tm_queue.domain.repository import QueueRepositoryProtocol
from src.tm_queue.infrastructure.persistence import QueueRepository


class QueueApplicationService:
    def __init__(
        self,
        repo: QueueRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: QueueRepositoryProtocol = repo or QueueRepository()
        self._clock = clock

    async def join(
        self, db: AsyncSession, user_id: str, req: JoinQueueRequest
    ) -> QueueEntryResponse:
        entry = QueueEntry(
            user_id=user_id,
            username=req.username,
            avatar=req.avatar,
            joined_at=self._clock(),
        )
        try:
            await self._repo.upsert_entry(db, entry)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return QueueEntryResponse.from_domain(entry)

    async def leave(self, db: AsyncSession, user_id: str) -> LeaveQueueResponse:
        try:
            removed = await self._repo.delete_entries(db, [user_id])
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return LeaveQueueResponse(user_id=user_id, removed=removed > 0)

    async def get_entry(self, db: AsyncSession, user_id: str) -> QueueEntryResponse:
        entry = await self._repo.get_entry(db, user_id)
        if entry is None:
            raise QueueEntryNotFoundError(user_id)
        return QueueEntryResponse.from_domain(entry)
