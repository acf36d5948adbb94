"""Domain models for tm_queue — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class QueueEntry:
    """A waiting player's request for a match; keyed by user_id."""

    user_id: str
    username: str | None
    avatar: str | None
    joined_at: datetime
