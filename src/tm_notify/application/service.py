"""NotificationService — fan-out when a player joins the queue.

Two independent deliveries per join:
  1. Push to every other registered device, split into a visible
     (background) group and a data-only (foreground) group, in batches.
  2. A Pushover alert to the operator.

Both are best-effort. Nothing here runs inside a transaction and no
failure propagates: a lost alert never blocks matchmaking.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tm_notify.domain.constants import (
    OPERATOR_USER_ID,
    PUSH_BATCH_SIZE,
    WEBHOOK_ALERT_TITLE,
)
from src.tm_notify.domain.fanout import (
    background_message,
    chunked,
    foreground_message,
    partition_recipients,
)
from src.tm_notify.domain.models import BatchResult, Device, FanOutReport, PushMessage
from src.tm_notify.domain.repository import DeviceRepositoryProtocol
from src.tm_notify.infrastructure.persistence import DeviceRepository
from src.tm_notify.infrastructure.push_gateway import PushGatewayClient
from src.tm_notify.infrastructure.pushover import PushoverClient
from src.tm_notify.infrastructure.rate_limiter import JoinRateLimiter

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        push: PushGatewayClient,
        pushover: PushoverClient,
        rate_limiter: JoinRateLimiter | None = None,
        repo: DeviceRepositoryProtocol | None = None,
        batch_size: int = PUSH_BATCH_SIZE,
    ) -> None:
        self._push = push
        self._pushover = pushover
        self._rate_limiter = rate_limiter or JoinRateLimiter()
        self._repo: DeviceRepositoryProtocol = repo or DeviceRepository()
        self._batch_size = batch_size

    async def close(self) -> None:
        await self._push.close()
        await self._pushover.close()

    async def on_queue_entry_created(
        self, db: AsyncSession, user_id: str, username: str | None = None
    ) -> FanOutReport:
        report = FanOutReport()
        display_name = username or user_id

        try:
            allowed = await self._rate_limiter.try_acquire(user_id)
        except Exception:
            # Marker store down: alert anyway rather than drop it
            logger.exception("Join rate-limit check failed for user %s", user_id)
            allowed = True

        if not allowed:
            # The window throttles client pushes only; the operator webhook is separate
            logger.info("Join push for user %s suppressed: joined again within window", user_id)
            report.rate_limited = True
            report.webhook_sent = await self._alert_operator(user_id, display_name)
            return report

        push_report, webhook_sent = await asyncio.gather(
            self._fan_out_push(db, user_id, display_name),
            self._alert_operator(user_id, display_name),
        )
        report.background, report.foreground = push_report
        report.webhook_sent = webhook_sent
        return report

    async def register_device(self, db: AsyncSession, device: Device) -> None:
        try:
            await self._repo.upsert_device(db, device)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _fan_out_push(
        self, db: AsyncSession, user_id: str, display_name: str
    ) -> tuple[BatchResult, BatchResult]:
        if not self._push.is_configured:
            logger.warning("Push gateway not configured, join push skipped")
            return BatchResult(), BatchResult()

        try:
            devices = await self._repo.list_other_devices(db, user_id)
        except Exception:
            logger.exception("Could not load devices for join push of user %s", user_id)
            return BatchResult(), BatchResult()

        recipients = partition_recipients(devices, user_id)
        background, foreground = await asyncio.gather(
            self._send_group(
                "background",
                recipients.background_tokens,
                background_message(user_id, display_name),
            ),
            self._send_group(
                "foreground",
                recipients.foreground_tokens,
                foreground_message(user_id, display_name),
            ),
        )
        logger.info(
            "Join push for user %s: background %d ok/%d failed, foreground %d ok/%d failed",
            user_id,
            background.success_count,
            background.failure_count,
            foreground.success_count,
            foreground.failure_count,
        )
        return background, foreground

    async def _send_group(
        self, group: str, tokens: list[str], message: PushMessage
    ) -> BatchResult:
        total = BatchResult()
        batches = list(chunked(tokens, self._batch_size))
        if not batches:
            return total

        results = await asyncio.gather(
            *(self._push.send_multicast(batch, message) for batch in batches),
            return_exceptions=True,
        )
        for batch, result in zip(batches, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Push batch of %d %s tokens failed: %s", len(batch), group, result
                )
                total.failure_count += len(batch)
            else:
                total.add(result)
        return total

    async def _alert_operator(self, user_id: str, display_name: str) -> bool:
        if user_id == OPERATOR_USER_ID:
            return False
        try:
            return await self._pushover.send(
                WEBHOOK_ALERT_TITLE, f"{display_name} joined the match queue"
            )
        except Exception:
            logger.exception("Operator alert failed for user %s", user_id)
            return False


_service: NotificationService | None = None


def get_notification_service() -> NotificationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = NotificationService(
            push=PushGatewayClient(settings.PUSH_GATEWAY_URL, settings.PUSH_GATEWAY_KEY),
            pushover=PushoverClient(settings.PUSHOVER_USER, settings.PUSHOVER_TOKEN),
        )
    return _service


async def close_notification_service() -> None:
    """Close the shared HTTP clients. Call on app shutdown."""
    global _service  # noqa: PLW0603
    if _service is not None:
        await _service.close()
        _service = None
