# src/tm_match/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.enums import SettlementSource
from src.tm_match.domain.models import Match, MatchHistoryEntry, Outcome, PlayerState


class MatchRepositoryProtocol(Protocol):
    async def create_match(self, db: AsyncSession, match: Match) -> None: ...

    async def get_match(
        self, db: AsyncSession, match_id: str, for_update: bool = False
    ) -> Match | None: ...

    async def mark_completed(
        self,
        db: AsyncSession,
        match_id: str,
        outcome: Outcome,
        completed_at: datetime,
    ) -> None: ...

    async def update_player_state(
        self, db: AsyncSession, match_id: str, player_id: str, state: PlayerState
    ) -> None: ...

    async def claim_settlement(
        self,
        db: AsyncSession,
        match_id: str,
        source: SettlementSource,
        settled_at: datetime,
    ) -> bool: ...

    async def insert_history(
        self, db: AsyncSession, entries: list[MatchHistoryEntry]
    ) -> None: ...

    async def list_history(
        self, db: AsyncSession, player_id: str, limit: int
    ) -> list[MatchHistoryEntry]: ...
