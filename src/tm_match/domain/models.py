"""Domain models for tm_match — pure dataclasses, no I/O."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.tm_common.datetime_utils import parse_timestamp


@dataclass
class PlayerState:
    """Per-player slice of a match, written by the playing clients."""

    username: str | None = None
    avatar: str | None = None
    progress: float = 0
    finished_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlayerState":
        progress = data.get("progress")
        if isinstance(progress, bool) or not isinstance(progress, (int, float)):
            progress = 0
        return cls(
            username=data.get("username"),
            avatar=data.get("avatar"),
            progress=max(progress, 0),
            finished_at=parse_timestamp(data.get("finished_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "avatar": self.avatar,
            "progress": self.progress,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


@dataclass
class Match:
    id: str
    players: list[str]
    player_states: dict[str, PlayerState]
    puzzle_id: str
    created_at: datetime | None
    start_at: datetime | None
    max_duration: int
    winner: str | None = None  # None with is_draw=True is a settled draw
    is_draw: bool = False
    completed_at: datetime | None = None

    @property
    def is_settled(self) -> bool:
        return self.completed_at is not None

    def opponent_of(self, player_id: str) -> str | None:
        return next((p for p in self.players if p != player_id), None)

    @classmethod
    def from_snapshot(cls, match_id: str, data: Mapping[str, Any]) -> "Match":
        """Build a Match from a last-known document snapshot (trigger payload)."""
        raw_states = data.get("player_states") or {}
        return cls(
            id=match_id,
            players=list(data.get("players") or []),
            player_states={
                uid: PlayerState.from_dict(state or {})
                for uid, state in raw_states.items()
            },
            puzzle_id=data.get("puzzle_id") or "",
            created_at=parse_timestamp(data.get("created_at")),
            start_at=parse_timestamp(data.get("start_at")),
            max_duration=int(data.get("max_duration") or 0),
            winner=data.get("winner"),
            is_draw=bool(data.get("is_draw", False)),
            completed_at=parse_timestamp(data.get("completed_at")),
        )


@dataclass(frozen=True)
class Outcome:
    """Result of winner resolution: a winner, or a draw with no winner."""

    winner_id: str | None
    is_draw: bool


@dataclass
class MatchHistoryEntry:
    """Immutable per-player record of one settled match."""

    match_id: str
    player_id: str
    opponent_id: str
    opponent_username: str | None
    puzzle_id: str
    result: str  # MatchResult value
    player_progress: float
    opponent_progress: float
    player_finished_at: datetime | None
    opponent_finished_at: datetime | None
    match_duration_ms: int
    completed_at: datetime
    created_at: datetime
    id: int | None = field(default=None)
