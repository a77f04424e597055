"""
Async Redis client shared by the event list cache and the rate limiter.
Opened in the application lifespan, closed at shutdown.

Redis is advisory here: when it is disabled or unreachable, callers get None
and fall back to uncached reads / unlimited requests.
"""

from typing import Optional

import redis.asyncio as redis

from lutonai.core.config import get_settings
from lutonai.core.logging import get_logger
from lutonai.core.metrics import redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()


class RedisClient:
    """Process-wide Redis connection pool."""

    _instance: Optional[redis.Redis] = None

    @classmethod
    async def connect(cls) -> Optional[redis.Redis]:
        if not settings.REDIS_ENABLED:
            return None
        if cls._instance is None:
            client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            try:
                await client.ping()
            except Exception as e:
                redis_connection_errors.inc()
                logger.error("redis_connection_failed", error=str(e))
                await client.aclose()
                return None
            cls._instance = client
            logger.info("redis_connected", url=settings.REDIS_URL)
        return cls._instance

    @classmethod
    async def close(cls) -> None:
        if cls._instance is not None:
            await cls._instance.aclose()
            cls._instance = None


async def get_redis() -> Optional[redis.Redis]:
    """Get the Redis client, connecting lazily. Returns None if Redis is unavailable."""
    return await RedisClient.connect()


async def close_redis() -> None:
    await RedisClient.close()
