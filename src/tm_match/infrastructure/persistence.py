"""MatchRepository — raw SQL persistence for matches, tickets and history.

All writes run inside the caller's transaction; nothing here commits.
players / player_states are JSONB; asyncpg hands JSONB back as text for
untyped text() queries, so the row mapper accepts both str and decoded JSON.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.enums import SettlementSource
from src.tm_match.domain.models import Match, MatchHistoryEntry, Outcome, PlayerState

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MATCH_COLUMNS = """
    id, players, player_states, puzzle_id,
    created_at, start_at, max_duration,
    winner, is_draw, completed_at
"""

_INSERT_MATCH_SQL = text("""
    INSERT INTO matches (
        id, players, player_states, puzzle_id,
        created_at, start_at, max_duration
    ) VALUES (
        :id, CAST(:players AS JSONB), CAST(:player_states AS JSONB), :puzzle_id,
        :created_at, :start_at, :max_duration
    )
""")

_GET_MATCH_SQL = text(f"SELECT {_MATCH_COLUMNS} FROM matches WHERE id = :match_id")

_GET_MATCH_FOR_UPDATE_SQL = text(
    f"SELECT {_MATCH_COLUMNS} FROM matches WHERE id = :match_id FOR UPDATE"
)

_MARK_COMPLETED_SQL = text("""
    UPDATE matches
    SET winner = :winner,
        is_draw = :is_draw,
        completed_at = :completed_at
    WHERE id = :match_id AND completed_at IS NULL
""")

_UPDATE_PLAYER_STATE_SQL = text("""
    UPDATE matches
    SET player_states = jsonb_set(
        player_states, ARRAY[CAST(:player_id AS TEXT)], CAST(:state AS JSONB), true
    )
    WHERE id = :match_id
""")

_CLAIM_SETTLEMENT_SQL = text("""
    INSERT INTO match_settlements (match_id, source, settled_at)
    VALUES (:match_id, :source, :settled_at)
    ON CONFLICT (match_id) DO NOTHING
    RETURNING match_id
""")

_INSERT_HISTORY_SQL = text("""
    INSERT INTO match_history (
        match_id, player_id, opponent_id, opponent_username, puzzle_id,
        result, player_progress, opponent_progress,
        player_finished_at, opponent_finished_at,
        match_duration_ms, completed_at, created_at
    ) VALUES (
        :match_id, :player_id, :opponent_id, :opponent_username, :puzzle_id,
        :result, :player_progress, :opponent_progress,
        :player_finished_at, :opponent_finished_at,
        :match_duration_ms, :completed_at, :created_at
    )
""")

_LIST_HISTORY_SQL = text("""
    SELECT id, match_id, player_id, opponent_id, opponent_username, puzzle_id,
           result, player_progress, opponent_progress,
           player_finished_at, opponent_finished_at,
           match_duration_ms, completed_at, created_at
    FROM match_history
    WHERE player_id = :player_id
    ORDER BY completed_at DESC, id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _json(value: Any) -> Any:
    return json.loads(value) if isinstance(value, str) else value


def _row_to_match(row: Any) -> Match:
    states = _json(row.player_states) or {}
    return Match(
        id=row.id,
        players=list(_json(row.players) or []),
        player_states={uid: PlayerState.from_dict(s or {}) for uid, s in states.items()},
        puzzle_id=row.puzzle_id,
        created_at=row.created_at,
        start_at=row.start_at,
        max_duration=row.max_duration,
        winner=row.winner,
        is_draw=row.is_draw,
        completed_at=row.completed_at,
    )


def _row_to_history(row: Any) -> MatchHistoryEntry:
    return MatchHistoryEntry(
        id=row.id,
        match_id=row.match_id,
        player_id=row.player_id,
        opponent_id=row.opponent_id,
        opponent_username=row.opponent_username,
        puzzle_id=row.puzzle_id,
        result=row.result,
        player_progress=row.player_progress,
        opponent_progress=row.opponent_progress,
        player_finished_at=row.player_finished_at,
        opponent_finished_at=row.opponent_finished_at,
        match_duration_ms=row.match_duration_ms,
        completed_at=row.completed_at,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MatchRepository:
    """Concrete implementation of MatchRepositoryProtocol using raw SQL."""

    async def create_match(self, db: AsyncSession, match: Match) -> None:
        await db.execute(
            _INSERT_MATCH_SQL,
            {
                "id": match.id,
                "players": json.dumps(match.players),
                "player_states": json.dumps(
                    {uid: s.to_dict() for uid, s in match.player_states.items()}
                ),
                "puzzle_id": match.puzzle_id,
                "created_at": match.created_at,
                "start_at": match.start_at,
                "max_duration": match.max_duration,
            },
        )

    async def get_match(
        self, db: AsyncSession, match_id: str, for_update: bool = False
    ) -> Match | None:
        sql = _GET_MATCH_FOR_UPDATE_SQL if for_update else _GET_MATCH_SQL
        row = (await db.execute(sql, {"match_id": match_id})).fetchone()
        return _row_to_match(row) if row else None

    async def mark_completed(
        self,
        db: AsyncSession,
        match_id: str,
        outcome: Outcome,
        completed_at: datetime,
    ) -> None:
        await db.execute(
            _MARK_COMPLETED_SQL,
            {
                "match_id": match_id,
                "winner": outcome.winner_id,
                "is_draw": outcome.is_draw,
                "completed_at": completed_at,
            },
        )

    async def update_player_state(
        self, db: AsyncSession, match_id: str, player_id: str, state: PlayerState
    ) -> None:
        await db.execute(
            _UPDATE_PLAYER_STATE_SQL,
            {
                "match_id": match_id,
                "player_id": player_id,
                "state": json.dumps(state.to_dict()),
            },
        )

    async def claim_settlement(
        self,
        db: AsyncSession,
        match_id: str,
        source: SettlementSource,
        settled_at: datetime,
    ) -> bool:
        """Insert the settlement ticket; False when another path already holds it."""
        result = await db.execute(
            _CLAIM_SETTLEMENT_SQL,
            {"match_id": match_id, "source": source.value, "settled_at": settled_at},
        )
        return result.fetchone() is not None

    async def insert_history(
        self, db: AsyncSession, entries: list[MatchHistoryEntry]
    ) -> None:
        for entry in entries:
            await db.execute(
                _INSERT_HISTORY_SQL,
                {
                    "match_id": entry.match_id,
                    "player_id": entry.player_id,
                    "opponent_id": entry.opponent_id,
                    "opponent_username": entry.opponent_username,
                    "puzzle_id": entry.puzzle_id,
                    "result": entry.result,
                    "player_progress": entry.player_progress,
                    "opponent_progress": entry.opponent_progress,
                    "player_finished_at": entry.player_finished_at,
                    "opponent_finished_at": entry.opponent_finished_at,
                    "match_duration_ms": entry.match_duration_ms,
                    "completed_at": entry.completed_at,
                    "created_at": entry.created_at,
                },
            )

    async def list_history(
        self, db: AsyncSession, player_id: str, limit: int
    ) -> list[MatchHistoryEntry]:
        rows = (
            await db.execute(_LIST_HISTORY_SQL, {"player_id": player_id, "limit": limit})
        ).fetchall()
        return [_row_to_history(row) for row in rows]
