"""
Redis caching for public event listings.

What we cache:
  - Event listing responses (paginated, JSON-serialized)
  - Key pattern: "events:list:page={page}&limit={limit}&upcoming={upcoming}&state={state}"
  - Searches are not cached (unbounded key space)

Invalidation:
  - Any event create/update/delete deletes every "events:list:*" key
  - TTL expiry as a safety net

Why NOT cache availability or single events:
  - Registration decisions need live confirmed counts
  - Availability is cheap to recompute (two grouped COUNTs)
"""

import json
from typing import Optional

from lutonai.core.config import get_settings
from lutonai.core.logging import get_logger
from lutonai.core.metrics import record_cache_operation
from lutonai.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"


def make_event_list_key(page: int, limit: int, upcoming_only: bool, state: Optional[str]) -> str:
    return f"{EVENT_LIST_PREFIX}page={page}&limit={limit}&upcoming={upcoming_only}&state={state or 'any'}"


async def get_cached(key: str) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached(key: str, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_cache() -> None:
    """Delete all cached event listings (SCAN over the key prefix)."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Redis keyspace statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
