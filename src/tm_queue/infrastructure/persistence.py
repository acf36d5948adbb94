"""QueueRepository — raw SQL persistence for match_queue."""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_queue.domain.models import QueueEntry

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_GET_ENTRY_SQL = text("""
    SELECT user_id, username, avatar, joined_at
    FROM match_queue WHERE user_id = :user_id
""")

_GET_ENTRY_FOR_UPDATE_SQL = text("""
    SELECT user_id, username, avatar, joined_at
    FROM match_queue WHERE user_id = :user_id
    FOR UPDATE
""")

# Oldest fresh entry other than the caller; user_id breaks joined_at ties
_FIND_PARTNER_SQL = text("""
    SELECT user_id, username, avatar, joined_at
    FROM match_queue
    WHERE joined_at > :joined_after
      AND user_id <> :user_id
    ORDER BY joined_at ASC, user_id ASC
    LIMIT 1
    FOR UPDATE
""")

_UPSERT_ENTRY_SQL = text("""
    INSERT INTO match_queue (user_id, username, avatar, joined_at)
    VALUES (:user_id, :username, :avatar, :joined_at)
    ON CONFLICT (user_id) DO UPDATE
    SET username = EXCLUDED.username,
        avatar = EXCLUDED.avatar,
        joined_at = EXCLUDED.joined_at
""")

_DELETE_ENTRIES_SQL = text("""
    DELETE FROM match_queue
    WHERE user_id = ANY(CAST(:user_ids AS TEXT[]))
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_entry(row: Any) -> QueueEntry:
    return QueueEntry(
        user_id=row.user_id,
        username=row.username,
        avatar=row.avatar,
        joined_at=row.joined_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class QueueRepository:
    """Concrete implementation of QueueRepositoryProtocol using raw SQL."""

    async def get_entry(
        self, db: AsyncSession, user_id: str, for_update: bool = False
    ) -> QueueEntry | None:
        sql = _GET_ENTRY_FOR_UPDATE_SQL if for_update else _GET_ENTRY_SQL
        row = (await db.execute(sql, {"user_id": user_id})).fetchone()
        return _row_to_entry(row) if row else None

    async def find_oldest_partner(
        self, db: AsyncSession, user_id: str, joined_after: datetime
    ) -> QueueEntry | None:
        row = (
            await db.execute(
                _FIND_PARTNER_SQL, {"user_id": user_id, "joined_after": joined_after}
            )
        ).fetchone()
        return _row_to_entry(row) if row else None

    async def upsert_entry(self, db: AsyncSession, entry: QueueEntry) -> None:
        await db.execute(
            _UPSERT_ENTRY_SQL,
            {
                "user_id": entry.user_id,
                "username": entry.username,
                "avatar": entry.avatar,
                "joined_at": entry.joined_at,
            },
        )

    async def delete_entries(self, db: AsyncSession, user_ids: list[str]) -> int:
        result = await db.execute(_DELETE_ENTRIES_SQL, {"user_ids": user_ids})
        return int(getattr(result, "rowcount", 0) or 0)
