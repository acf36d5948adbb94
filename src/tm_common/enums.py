"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class MatchResult(str, Enum):
    """Per-player outcome stored on a history entry."""
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class SettlementSource(str, Enum):
    """Which entry point claimed the settlement ticket."""
    COMPLETE_CALL = "COMPLETE_CALL"
    MATCH_REMOVED = "MATCH_REMOVED"
