"""Shared Redis client for the session store."""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# from_url does not connect; the pool opens lazily on first command
redis_client: aioredis.Redis = aioredis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_timeout=settings.redis_socket_timeout,
    socket_connect_timeout=settings.redis_socket_timeout,
)


def get_redis() -> aioredis.Redis:
    return redis_client


async def ping_redis() -> bool:
    """True when Redis answers PING."""
    try:
        return bool(await redis_client.ping())
    except RedisError as exc:
        logger.warning(f"Redis ping failed: {exc}")
        return False


async def close_redis() -> None:
    await redis_client.aclose()
    logger.info("Redis connection pool closed")
