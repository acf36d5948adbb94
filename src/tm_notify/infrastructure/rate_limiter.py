"""Per-user join alert rate limit, backed by a Redis marker with TTL."""

from collections.abc import Awaitable, Callable
from datetime import datetime

import redis.asyncio as aioredis

from src.tm_common.datetime_utils import to_millis, utc_now
from src.tm_common.redis_client import get_redis
from src.tm_notify.domain.constants import JOIN_ALERT_WINDOW_SECONDS

RECENT_JOIN_KEY_PREFIX = "recent_join:"


class JoinRateLimiter:
    """SET NX EX makes the check-and-mark a single atomic step.

    Redis expires the marker, so stale markers never need cleaning up.
    """

    def __init__(
        self,
        redis_getter: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        window_seconds: int = JOIN_ALERT_WINDOW_SECONDS,
    ) -> None:
        self._redis_getter = redis_getter
        self.window_seconds = window_seconds

    async def try_acquire(self, user_id: str, now: datetime | None = None) -> bool:
        """True when no alert went out for this user inside the window."""
        redis = await self._redis_getter()
        stamp = to_millis(now or utc_now())
        acquired = await redis.set(
            f"{RECENT_JOIN_KEY_PREFIX}{user_id}",
            str(stamp),
            nx=True,
            ex=self.window_seconds,
        )
        return bool(acquired)
