"""Pydantic request/response schemas for tm_queue."""

from pydantic import BaseModel, Field

from src.tm_queue.domain.models import QueueEntry


class JoinQueueRequest(BaseModel):
    username: str | None = Field(None, max_length=64)
    avatar: str | None = Field(None, max_length=512)


class QueueEntryResponse(BaseModel):
    user_id: str
    username: str | None
    avatar: str | None
    joined_at: str

    @classmethod
    def from_domain(cls, e: QueueEntry) -> "QueueEntryResponse":
        return cls(
            user_id=e.user_id,
            username=e.username,
            avatar=e.avatar,
            joined_at=e.joined_at.isoformat(),
        )


class LeaveQueueResponse(BaseModel):
    user_id: str
    removed: bool
