"""Winner resolution — pure function of the two players' states.

Ranking, best first:
  1. finished before unfinished
  2. among finished: earlier finished_at
  3. among unfinished: higher progress

Then the top two are compared:
  finished vs unfinished  → the finisher wins
  both unfinished         → higher progress wins, equal progress is a draw
  both finished           → earlier finished_at wins, same instant is a draw

Defined for exactly two players only; anything else raises ValueError.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from src.tm_match.domain.models import Outcome, PlayerState

logger = logging.getLogger(__name__)

REQUIRED_PLAYERS = 2


@dataclass(frozen=True)
class _Standing:
    player_id: str
    finished_at: datetime | None
    progress: float

    def rank_key(self) -> tuple[bool, float]:
        if self.finished_at is not None:
            return (False, self.finished_at.timestamp())
        return (True, -self.progress)


def _standing(player_id: str, state: PlayerState | None) -> _Standing:
    if state is None:
        logger.warning("Player state missing for player %s, using defaults", player_id)
        return _Standing(player_id=player_id, finished_at=None, progress=0)
    return _Standing(
        player_id=player_id,
        finished_at=state.finished_at,
        progress=state.progress or 0,
    )


def resolve_winner(
    players: Sequence[str],
    player_states: Mapping[str, PlayerState | None],
) -> Outcome:
    """Decide the outcome of a two-player match.

    Args:
        players: the match's ordered player ids; must be two distinct ids.
        player_states: userId → PlayerState; a missing entry counts as
            unfinished with zero progress.

    Raises:
        ValueError: players is not exactly two distinct ids.
    """
    if len(players) != REQUIRED_PLAYERS or len(set(players)) != REQUIRED_PLAYERS:
        raise ValueError(
            f"Winner resolution requires exactly {REQUIRED_PLAYERS} distinct players, "
            f"got {list(players)}"
        )

    ranked = sorted(
        (_standing(pid, player_states.get(pid)) for pid in players),
        key=_Standing.rank_key,
    )
    first, second = ranked

    if first.finished_at is None:
        # Neither finished
        if first.progress == second.progress:
            return Outcome(winner_id=None, is_draw=True)
        return Outcome(winner_id=first.player_id, is_draw=False)

    if second.finished_at is None or first.finished_at != second.finished_at:
        return Outcome(winner_id=first.player_id, is_draw=False)

    # Both finished at the same instant
    return Outcome(winner_id=None, is_draw=True)
