"""PairingEngine — turns two waiting queue entries into one match.

Runs once per "queue entry changed" event. The whole pairing is a single
SERIALIZABLE transaction (see run_transaction): two concurrent attempts to
claim the same partner cannot both commit. The loser is retried, finds its
own entry or the partner's already gone, and aborts quietly.

Every abort (withdrawn, already paired, nobody to pair with) is a normal
outcome, not an error.
"""

import functools
import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import Transact, run_transaction
from src.tm_common.datetime_utils import utc_now
from src.tm_match.domain.models import Match, PlayerState
from src.tm_match.domain.repository import MatchRepositoryProtocol
from src.tm_match.infrastructure.persistence import MatchRepository
from src.tm_queue.domain.constants import (
    MATCH_MAX_DURATION_SECONDS,
    MATCH_START_DELAY_SECONDS,
    QUEUE_TTL_SECONDS,
)
from src.tm_queue.domain.models import QueueEntry
from src.tm_queue.domain.puzzle import random_puzzle_id
from src.tm_queue.domain.repository import QueueRepositoryProtocol
from src.tm_queue.infrastructure.persistence import QueueRepository

logger = logging.getLogger(__name__)


def new_match_id() -> str:
    return uuid.uuid4().hex


def _initial_state(entry: QueueEntry) -> PlayerState:
    return PlayerState(username=entry.username, avatar=entry.avatar, progress=0)


class PairingEngine:
    def __init__(
        self,
        queue_repo: QueueRepositoryProtocol | None = None,
        match_repo: MatchRepositoryProtocol | None = None,
        transact: Transact | None = None,
        clock: Callable[[], datetime] = utc_now,
        pick_puzzle: Callable[[], str] = random_puzzle_id,
        make_match_id: Callable[[], str] = new_match_id,
    ) -> None:
        self._queue: QueueRepositoryProtocol = queue_repo or QueueRepository()
        self._matches: MatchRepositoryProtocol = match_repo or MatchRepository()
        self._transact: Transact = transact or run_transaction
        self._clock = clock
        self._pick_puzzle = pick_puzzle
        self._make_match_id = make_match_id

    async def on_queue_entry_changed(self, user_id: str) -> Match | None:
        """Try to pair `user_id`. Returns the created match, or None on any abort.

        Never raises: failures are logged, the trigger has no caller.
        """
        logger.info("Queue entry changed for user %s", user_id)
        try:
            match: Match | None = await self._transact(
                functools.partial(self._pair_in_tx, user_id)
            )
        except Exception:
            logger.exception("Matchmaking failed for user %s", user_id)
            return None

        if match is not None:
            logger.info(
                "Match created successfully: %s for users %s and %s",
                match.id,
                match.players[0],
                match.players[1],
            )
        return match

    async def _pair_in_tx(self, user_id: str, db: AsyncSession) -> Match | None:
        own = await self._queue.get_entry(db, user_id, for_update=True)
        if own is None:
            logger.info("Pairing aborted: user %s no longer in queue", user_id)
            return None

        now = self._clock()
        cutoff = now - timedelta(seconds=QUEUE_TTL_SECONDS)
        candidate = await self._queue.find_oldest_partner(db, user_id, cutoff)
        if candidate is None:
            logger.info("Pairing aborted: no available partner for user %s", user_id)
            return None

        partner = await self._queue.get_entry(db, candidate.user_id, for_update=True)
        if partner is None:
            logger.info("Pairing aborted: partner %s no longer in queue", candidate.user_id)
            return None

        logger.info("Attempting to match user %s with %s", user_id, partner.user_id)
        match = Match(
            id=self._make_match_id(),
            players=[own.user_id, partner.user_id],
            player_states={
                own.user_id: _initial_state(own),
                partner.user_id: _initial_state(partner),
            },
            puzzle_id=self._pick_puzzle(),
            created_at=now,
            start_at=now + timedelta(seconds=MATCH_START_DELAY_SECONDS),
            max_duration=MATCH_MAX_DURATION_SECONDS,
        )
        await self._matches.create_match(db, match)
        await self._queue.delete_entries(db, [own.user_id, partner.user_id])
        return match


_engine: PairingEngine | None = None


def get_pairing_engine() -> PairingEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = PairingEngine()
    return _engine
