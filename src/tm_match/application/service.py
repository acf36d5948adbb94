"""MatchApplicationService — player-facing reads and progress updates.

Settlement lives in settlement.py; this service only serves the playing
clients: read the match, report progress, read own history.
"""

import functools
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import Transact, run_transaction
from src.tm_common.datetime_utils import utc_now
from src.tm_common.errors import (
    MatchAlreadyCompletedError,
    MatchNotFoundError,
    NotAMatchPlayerError,
)
from src.tm_match.application.schemas import (
    HistoryEntryOut,
    HistoryListResponse,
    MatchDetail,
    ProgressRequest,
)
from src.tm_match.domain.models import PlayerState
from src.tm_match.domain.repository import MatchRepositoryProtocol
from src.tm_match.infrastructure.persistence import MatchRepository


class MatchApplicationService:
    def __init__(
        self,
        repo: MatchRepositoryProtocol | None = None,
        transact: Transact | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: MatchRepositoryProtocol = repo or MatchRepository()
        self._transact: Transact = transact or run_transaction
        self._clock = clock

    async def get_match(self, db: AsyncSession, match_id: str, user_id: str) -> MatchDetail:
        match = await self._repo.get_match(db, match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        if user_id not in match.players:
            raise NotAMatchPlayerError(match_id)
        return MatchDetail.from_domain(match)

    async def update_progress(
        self, match_id: str, user_id: str, req: ProgressRequest
    ) -> MatchDetail:
        return await self._transact(
            functools.partial(self._update_progress_in_tx, match_id, user_id, req)
        )

    async def _update_progress_in_tx(
        self, match_id: str, user_id: str, req: ProgressRequest, db: AsyncSession
    ) -> MatchDetail:
        match = await self._repo.get_match(db, match_id, for_update=True)
        if match is None:
            raise MatchNotFoundError(match_id)
        if user_id not in match.players:
            raise NotAMatchPlayerError(match_id)
        if match.is_settled:
            raise MatchAlreadyCompletedError(match_id)

        current = match.player_states.get(user_id) or PlayerState()
        # finished_at is stamped once; a later report never moves or clears it
        finished_at = current.finished_at
        if req.finished and finished_at is None:
            finished_at = self._clock()
        state = PlayerState(
            username=current.username,
            avatar=current.avatar,
            progress=req.progress,
            finished_at=finished_at,
        )
        await self._repo.update_player_state(db, match_id, user_id, state)
        match.player_states[user_id] = state
        return MatchDetail.from_domain(match)

    async def list_history(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> HistoryListResponse:
        entries = await self._repo.list_history(db, user_id, limit)
        return HistoryListResponse(items=[HistoryEntryOut.from_domain(e) for e in entries])
