"""Pydantic payloads for trigger deliveries."""

from typing import Any

from pydantic import BaseModel, Field


class QueueEntryEvent(BaseModel):
    """A queue entry was created or updated."""

    user_id: str = Field(..., min_length=1)
    username: str | None = None
    avatar: str | None = None


class MatchRemovedEvent(BaseModel):
    """A match document was deleted; `snapshot` is its last-known state."""

    match_id: str = Field(..., min_length=1)
    snapshot: dict[str, Any] = Field(default_factory=dict)


class EventAck(BaseModel):
    event: str
    handled: bool
