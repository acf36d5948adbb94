"""Pydantic request/response schemas for tm_match.

All responses are wrapped in ApiResponse at the router layer.
Timestamps are serialised as ISO-8601 strings.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.tm_match.domain.models import Match, MatchHistoryEntry, PlayerState


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


# ---------------------------------------------------------------------------
# completeMatch
# ---------------------------------------------------------------------------


class CompleteMatchRequest(BaseModel):
    # Optional at the schema level so a missing id maps to error 3001, not a 422 body
    match_id: str | None = None


class CompleteMatchResponse(BaseModel):
    success: bool = True
    match_id: str
    winner: str | None = None
    is_draw: bool = False


# ---------------------------------------------------------------------------
# Match detail / progress
# ---------------------------------------------------------------------------


class PlayerStateOut(BaseModel):
    username: str | None
    avatar: str | None
    progress: float
    finished_at: str | None

    @classmethod
    def from_domain(cls, s: PlayerState) -> "PlayerStateOut":
        return cls(
            username=s.username,
            avatar=s.avatar,
            progress=s.progress,
            finished_at=_iso(s.finished_at),
        )


class MatchDetail(BaseModel):
    match_id: str
    players: list[str]
    player_states: dict[str, PlayerStateOut]
    puzzle_id: str
    created_at: str | None
    start_at: str | None
    max_duration: int
    winner: str | None
    is_draw: bool
    completed_at: str | None

    @classmethod
    def from_domain(cls, m: Match) -> "MatchDetail":
        return cls(
            match_id=m.id,
            players=m.players,
            player_states={
                uid: PlayerStateOut.from_domain(s) for uid, s in m.player_states.items()
            },
            puzzle_id=m.puzzle_id,
            created_at=_iso(m.created_at),
            start_at=_iso(m.start_at),
            max_duration=m.max_duration,
            winner=m.winner,
            is_draw=m.is_draw,
            completed_at=_iso(m.completed_at),
        )


class ProgressRequest(BaseModel):
    progress: float = Field(..., ge=0)
    finished: bool = False


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class HistoryEntryOut(BaseModel):
    match_id: str
    opponent_id: str
    opponent_username: str | None
    puzzle_id: str
    result: str
    player_progress: float
    opponent_progress: float
    player_finished_at: str | None
    opponent_finished_at: str | None
    match_duration_ms: int
    completed_at: str
    created_at: str

    @classmethod
    def from_domain(cls, e: MatchHistoryEntry) -> "HistoryEntryOut":
        return cls(
            match_id=e.match_id,
            opponent_id=e.opponent_id,
            opponent_username=e.opponent_username,
            puzzle_id=e.puzzle_id,
            result=e.result,
            player_progress=e.player_progress,
            opponent_progress=e.opponent_progress,
            player_finished_at=_iso(e.player_finished_at),
            opponent_finished_at=_iso(e.opponent_finished_at),
            match_duration_ms=e.match_duration_ms,
            completed_at=e.completed_at.isoformat(),
            created_at=e.created_at.isoformat(),
        )


class HistoryListResponse(BaseModel):
    items: list[HistoryEntryOut]
