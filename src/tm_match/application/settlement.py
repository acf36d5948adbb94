"""SettlementCoordinator — settles a match exactly once from either trigger.

Entry points:
  complete_match()        explicit, caller-invoked; runs in one transaction
                          that reads the match, resolves, stamps it and
                          writes history.
  settle_removed_match()  fired after a match row was deleted; works from
                          the pre-deletion snapshot.

Both paths claim the match's row in match_settlements inside the same
transaction that writes history. Whichever path inserts the ticket writes
the two history entries; the other observes the ticket and does nothing.
"""

import functools
import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import Transact, run_transaction
from src.tm_common.datetime_utils import utc_now
from src.tm_common.enums import SettlementSource
from src.tm_common.errors import AppError, MatchCompletionError, MatchIdRequiredError
from src.tm_match.application.schemas import CompleteMatchResponse
from src.tm_match.domain.history import build_history_entries
from src.tm_match.domain.models import Match, Outcome
from src.tm_match.domain.repository import MatchRepositoryProtocol
from src.tm_match.domain.resolver import resolve_winner
from src.tm_match.infrastructure.persistence import MatchRepository

logger = logging.getLogger(__name__)


class SettlementCoordinator:
    def __init__(
        self,
        repo: MatchRepositoryProtocol | None = None,
        transact: Transact | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: MatchRepositoryProtocol = repo or MatchRepository()
        self._transact: Transact = transact or run_transaction
        self._clock = clock

    # ------------------------------------------------------------------
    # Explicit completion
    # ------------------------------------------------------------------

    async def complete_match(self, match_id: str | None) -> CompleteMatchResponse:
        """Settle `match_id` if needed and return its outcome.

        Idempotent: a missing match or an already-settled one returns success
        without writing history again.

        Raises:
            MatchIdRequiredError: match_id missing or blank (before any store access).
            MatchCompletionError: anything unexpected inside the transaction.
        """
        if not match_id or not match_id.strip():
            raise MatchIdRequiredError()

        logger.info("Completing match: %s", match_id)
        try:
            result: CompleteMatchResponse = await self._transact(
                functools.partial(self._complete_in_tx, match_id)
            )
        except AppError:
            raise
        except Exception as exc:
            logger.exception("Failed to complete match %s", match_id)
            raise MatchCompletionError(str(exc)) from exc
        return result

    async def _complete_in_tx(
        self, match_id: str, db: AsyncSession
    ) -> CompleteMatchResponse:
        match = await self._repo.get_match(db, match_id, for_update=True)
        if match is None:
            logger.info("Match %s already resolved", match_id)
            return CompleteMatchResponse(match_id=match_id)

        if match.is_settled:
            logger.info(
                "Match %s already resolved with winner: %s",
                match_id,
                match.winner or "draw",
            )
            return CompleteMatchResponse(
                match_id=match_id, winner=match.winner, is_draw=match.is_draw
            )

        completed_at = self._clock()
        outcome = resolve_winner(match.players, match.player_states)
        await self._repo.mark_completed(db, match_id, outcome, completed_at)
        logger.info(
            "Winner determined for match %s: %s",
            match_id,
            "draw" if outcome.is_draw else outcome.winner_id,
        )

        claimed = await self._repo.claim_settlement(
            db, match_id, SettlementSource.COMPLETE_CALL, completed_at
        )
        if claimed:
            entries = build_history_entries(match, outcome, completed_at)
            await self._repo.insert_history(db, entries)
            logger.info("Match history entries created for match %s", match_id)
        else:
            logger.warning(
                "Settlement ticket for live match %s already taken, history not rewritten",
                match_id,
            )

        return CompleteMatchResponse(
            match_id=match_id, winner=outcome.winner_id, is_draw=outcome.is_draw
        )

    # ------------------------------------------------------------------
    # Implicit completion on removal
    # ------------------------------------------------------------------

    async def settle_removed_match(self, snapshot: Match) -> bool:
        """Write history for a deleted match unless it was already settled.

        Never raises: there is no caller to report to. Returns True when this
        call wrote the history entries.
        """
        try:
            written: bool = await self._transact(
                functools.partial(self._settle_removed_in_tx, snapshot)
            )
        except Exception:
            logger.exception("Settlement on removal failed for match %s", snapshot.id)
            return False
        return written

    async def _settle_removed_in_tx(self, snapshot: Match, db: AsyncSession) -> bool:
        settled_at = self._clock()
        claimed = await self._repo.claim_settlement(
            db, snapshot.id, SettlementSource.MATCH_REMOVED, settled_at
        )
        if not claimed:
            logger.info("Match %s already settled, skipping history on removal", snapshot.id)
            return False

        if snapshot.is_settled or snapshot.winner is not None:
            outcome = Outcome(
                winner_id=snapshot.winner,
                is_draw=snapshot.is_draw or snapshot.winner is None,
            )
            completed_at = snapshot.completed_at or settled_at
        else:
            outcome = resolve_winner(snapshot.players, snapshot.player_states)
            completed_at = settled_at
            logger.info(
                "Winner determined on removal of match %s: %s",
                snapshot.id,
                "draw" if outcome.is_draw else outcome.winner_id,
            )

        entries = build_history_entries(snapshot, outcome, completed_at)
        await self._repo.insert_history(db, entries)
        logger.info("Match history entries created on removal of match %s", snapshot.id)
        return True


_coordinator: SettlementCoordinator | None = None


def get_settlement_coordinator() -> SettlementCoordinator:
    global _coordinator  # noqa: PLW0603
    if _coordinator is None:
        _coordinator = SettlementCoordinator()
    return _coordinator
