"""Internal trigger endpoints, pushed to by the event delivery substrate.

POST /internal/events/queue-entry-written  — try to pair the player
POST /internal/events/queue-entry-created  — join alert fan-out
POST /internal/events/match-removed        — settle a deleted, unsettled match

Delivery is at-least-once and nobody reads the reply: every handler is
idempotent and answers 202 even when the work failed (failures are logged).
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tm_common.database import get_db_session
from src.tm_common.response import ApiResponse, success_response
from src.tm_events.application.schemas import EventAck, MatchRemovedEvent, QueueEntryEvent
from src.tm_gateway.auth.dependencies import verify_event_token
from src.tm_match.application.settlement import (
    SettlementCoordinator,
    get_settlement_coordinator,
)
from src.tm_match.domain.models import Match
from src.tm_notify.application.service import NotificationService, get_notification_service
from src.tm_queue.application.pairing import PairingEngine, get_pairing_engine

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/internal/events",
    tags=["internal-events"],
    dependencies=[Depends(verify_event_token)],
)


@router.post("/queue-entry-written", status_code=202)
async def queue_entry_written(
    body: QueueEntryEvent,
    request: Request,
    engine: Annotated[PairingEngine, Depends(get_pairing_engine)],
) -> ApiResponse:
    match = await engine.on_queue_entry_changed(body.user_id)
    ack = EventAck(event="queue-entry-written", handled=match is not None)
    return success_response(ack.model_dump(), request)


@router.post("/queue-entry-created", status_code=202)
async def queue_entry_created(
    body: QueueEntryEvent,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> ApiResponse:
    try:
        report = await service.on_queue_entry_created(db, body.user_id, body.username)
        handled = not report.rate_limited
    except Exception:
        logger.exception("Join fan-out failed for user %s", body.user_id)
        handled = False
    ack = EventAck(event="queue-entry-created", handled=handled)
    return success_response(ack.model_dump(), request)


@router.post("/match-removed", status_code=202)
async def match_removed(
    body: MatchRemovedEvent,
    request: Request,
    coordinator: Annotated[SettlementCoordinator, Depends(get_settlement_coordinator)],
) -> ApiResponse:
    try:
        snapshot = Match.from_snapshot(body.match_id, body.snapshot)
    except (TypeError, ValueError, AttributeError, OverflowError):
        logger.exception("Unreadable snapshot for removed match %s", body.match_id)
        snapshot = None

    handled = False
    if snapshot is not None:
        handled = await coordinator.settle_removed_match(snapshot)
    ack = EventAck(event="match-removed", handled=handled)
    return success_response(ack.model_dump(), request)
