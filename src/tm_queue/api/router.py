"""tm_queue REST endpoints, all require JWT authentication.

POST   /queue   — join (or refresh) the caller's queue entry
GET    /queue   — the caller's queue entry, 404 when not queued
DELETE /queue   — leave the queue; idempotent
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import get_db_session
from src.tm_common.response import ApiResponse, success_response
from src.tm_gateway.auth.dependencies import get_current_user_id
from src.tm_queue.application.schemas import JoinQueueRequest
from src.tm_queue.application.service import QueueApplicationService

router = APIRouter(prefix="/queue", tags=["queue"])

_service = QueueApplicationService()


@router.post("", status_code=201)
async def join_queue(
    body: JoinQueueRequest,
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.join(db, user_id, body)
    return success_response(data.model_dump(), request)


@router.get("")
async def get_queue_entry(
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.get_entry(db, user_id)
    return success_response(data.model_dump(), request)


@router.delete("")
async def leave_queue(
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.leave(db, user_id)
    return success_response(data.model_dump(), request)
