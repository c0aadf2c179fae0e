"""Redis client factory, used for the settlement config snapshot cache only.

Wallet balances never touch Redis. The cache is optional on the read path:
a short socket timeout keeps an unreachable Redis from stalling requests
that can fall back to PostgreSQL.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        )
    return _redis_pool


async def ping_redis() -> bool:
    """True if Redis answers PING. Startup continues without the cache otherwise."""
    try:
        redis = await get_redis()
        await redis.ping()
    except RedisError as exc:
        logger.warning("Redis unavailable at startup, config reads will hit PostgreSQL: %s", exc)
        return False
    return True


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
