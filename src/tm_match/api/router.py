"""tm_match REST endpoints, all require JWT authentication.

POST /matches/complete                — completeMatch(matchId), idempotent
GET  /matches/{match_id}              — match detail for one of its players
POST /matches/{match_id}/progress     — report own progress / finish
GET  /history                         — caller's history, newest first
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import get_db_session
from src.tm_common.response import ApiResponse, success_response
from src.tm_gateway.auth.dependencies import get_current_user_id
from src.tm_match.application.schemas import CompleteMatchRequest, ProgressRequest
from src.tm_match.application.service import MatchApplicationService
from src.tm_match.application.settlement import (
    SettlementCoordinator,
    get_settlement_coordinator,
)

router = APIRouter(prefix="/matches", tags=["matches"])
history_router = APIRouter(prefix="/history", tags=["history"])

_service = MatchApplicationService()


@router.post("/complete")
async def complete_match(
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    coordinator: Annotated[SettlementCoordinator, Depends(get_settlement_coordinator)],
    body: Annotated[CompleteMatchRequest | None, Body()] = None,
) -> ApiResponse:
    # No body at all is the same caller mistake as a body without match_id
    result = await coordinator.complete_match(body.match_id if body else None)
    return success_response(result.model_dump(), request)


@router.get("/{match_id}")
async def get_match(
    match_id: str,
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_match(db, match_id, user_id)
    return success_response(result.model_dump(), request)


@router.post("/{match_id}/progress")
async def report_progress(
    match_id: str,
    body: ProgressRequest,
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
) -> ApiResponse:
    result = await _service.update_progress(match_id, user_id, body)
    return success_response(result.model_dump(), request)


@history_router.get("")
async def list_history(
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_history(db, user_id, limit)
    return success_response(result.model_dump(), request)
