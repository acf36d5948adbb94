"""Per-player history construction, shared by both settlement paths."""

import logging
from datetime import datetime

from src.tm_common.enums import MatchResult
from src.tm_match.domain.models import Match, MatchHistoryEntry, Outcome, PlayerState

logger = logging.getLogger(__name__)


def match_duration_ms(start_at: datetime | None, completed_at: datetime) -> int:
    """Milliseconds from start to completion, clamped to >= 0.

    A missing start time yields 0.
    """
    if start_at is None:
        logger.warning("Match has no start_at, recording duration 0")
        return 0
    duration = int((completed_at - start_at).total_seconds() * 1000)
    if duration < 0:
        logger.warning("Negative match duration calculated: %dms, setting to 0", duration)
        return 0
    return duration


def result_for(player_id: str, outcome: Outcome) -> MatchResult:
    if outcome.is_draw:
        return MatchResult.DRAW
    return MatchResult.WIN if player_id == outcome.winner_id else MatchResult.LOSS


def build_history_entries(
    match: Match,
    outcome: Outcome,
    completed_at: datetime,
) -> list[MatchHistoryEntry]:
    """One mirrored entry per player; a player without an opponent is skipped."""
    duration = match_duration_ms(match.start_at, completed_at)
    created_at = match.created_at
    if created_at is None:
        logger.warning(
            "Match %s has no created_at, falling back to completed_at", match.id
        )
        created_at = completed_at

    entries: list[MatchHistoryEntry] = []
    for player_id in match.players:
        opponent_id = match.opponent_of(player_id)
        if opponent_id is None:
            logger.error("No opponent found for player %s in match %s", player_id, match.id)
            continue

        player = match.player_states.get(player_id) or PlayerState()
        opponent = match.player_states.get(opponent_id) or PlayerState()
        entries.append(
            MatchHistoryEntry(
                match_id=match.id,
                player_id=player_id,
                opponent_id=opponent_id,
                opponent_username=opponent.username,
                puzzle_id=match.puzzle_id,
                result=result_for(player_id, outcome).value,
                player_progress=player.progress or 0,
                opponent_progress=opponent.progress or 0,
                player_finished_at=player.finished_at,
                opponent_finished_at=opponent.finished_at,
                match_duration_ms=duration,
                completed_at=completed_at,
                created_at=created_at,
            )
        )
    return entries
