"""
Connections to systems outside the database: Redis for caching and rate limits.
"""

from .redis_client import get_redis, close_redis, RedisClient

__all__ = ['get_redis', 'close_redis', 'RedisClient']
