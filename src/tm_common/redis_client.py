"""Shared Redis pool. Holds short-lived markers only (recent-join rate limit).

Match, queue and history state never touch Redis; losing it costs at most
one duplicate join alert.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Lazily create the pool on first use."""
    global _pool  # noqa: PLW0603
    if _pool is None:
        _pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            health_check_interval=30,
        )
    return _pool


async def ping_redis() -> None:
    """Raise if Redis is unreachable. Called once at startup."""
    redis = await get_redis()
    await redis.ping()
    logger.info("Redis reachable at %s", settings.REDIS_URL.rsplit("@", 1)[-1])


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
        _pool = None
