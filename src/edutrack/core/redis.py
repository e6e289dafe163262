"""
Redis Configuration

Async Redis client shared by the rate limiter. Redis is optional outside
production: when ``init_redis()`` fails at startup the client stays ``None``
and callers fall back to in-process state.
"""

import logging

from redis.asyncio import Redis, from_url

from edutrack.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """
    Open the Redis connection and ping it.

    Call this on application startup.
    """
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    logger.info("Redis connection initialized")
    return redis_client


def get_redis() -> Redis | None:
    """Return the shared client, or None when Redis is not connected."""
    return redis_client


def is_redis_available() -> bool:
    return redis_client is not None


async def close_redis() -> None:
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
