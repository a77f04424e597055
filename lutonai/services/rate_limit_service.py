"""
Sliding-window rate limiting backed by a Redis sorted set.

Each (scope, client) pair owns one key. A request:
  1. drops entries older than the window (ZREMRANGEBYSCORE)
  2. counts what is left (ZCARD)
  3. records itself (ZADD) and refreshes the key TTL
all in one MULTI/EXEC pipeline. Over the limit, the request is rejected
with 429 and a Retry-After based on the oldest entry in the window.

Fails open: with Redis disabled or erroring, requests are allowed. The
limiter protects public forms from spam, it is not a security boundary.
"""

import time
import uuid
from dataclasses import dataclass
from typing import Callable

from fastapi import Request

from lutonai.core.config import get_settings
from lutonai.core.exceptions import RateLimitExceeded
from lutonai.core.logging import get_logger
from lutonai.core.metrics import record_rate_limit, redis_connection_errors
from lutonai.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    reset: float  # unix seconds when the oldest request leaves the window


class RateLimiter:
    def __init__(
        self,
        scope: str,
        requests: int = settings.RATE_LIMIT_REQUESTS,
        window_seconds: int = settings.RATE_LIMIT_WINDOW_SECONDS,
        prefix: str = settings.RATE_LIMIT_PREFIX,
    ):
        self.scope = scope
        self.requests = requests
        self.window_seconds = window_seconds
        self.prefix = prefix

    def key(self, identifier: str) -> str:
        return f"{self.prefix}:{self.scope}:{identifier}"

    async def check(self, identifier: str) -> RateLimitResult:
        now = time.time()
        client = await get_redis()
        if client is None:
            record_rate_limit(self.scope, "bypassed")
            return RateLimitResult(True, self.requests, self.requests, now)

        key = self.key(identifier)
        member = f"{now}:{uuid.uuid4().hex[:8]}"
        try:
            async with client.pipeline(transaction=True) as pipe:
                pipe.zremrangebyscore(key, 0, now - self.window_seconds)
                pipe.zcard(key)
                pipe.zadd(key, {member: now})
                pipe.expire(key, self.window_seconds)
                pipe.zrange(key, 0, 0, withscores=True)
                _, count, _, _, oldest = await pipe.execute()
        except Exception as e:
            redis_connection_errors.inc()
            record_rate_limit(self.scope, "bypassed")
            logger.error("rate_limit_check_failed", scope=self.scope, error=str(e))
            return RateLimitResult(True, 0, 0, now)

        oldest_score = oldest[0][1] if oldest else now
        reset = oldest_score + self.window_seconds
        if count >= self.requests:
            # the rejected request must not extend the window
            try:
                await client.zrem(key, member)
            except Exception as e:
                logger.error("rate_limit_cleanup_failed", scope=self.scope, error=str(e))
            record_rate_limit(self.scope, "limited")
            return RateLimitResult(False, self.requests, 0, reset)

        record_rate_limit(self.scope, "allowed")
        return RateLimitResult(True, self.requests, self.requests - count - 1, reset)

    async def reset(self, identifier: str) -> None:
        client = await get_redis()
        if client is None:
            return
        try:
            await client.delete(self.key(identifier))
        except Exception as e:
            logger.error("rate_limit_reset_failed", scope=self.scope, error=str(e))


def client_identifier(request: Request) -> str:
    """
    Address the limit is keyed on.

    The socket peer, unless the peer is a trusted proxy: then the nearest
    X-Forwarded-For hop that is not itself a trusted proxy. Hops further left
    are client supplied and ignored.
    """
    peer = request.client.host if request.client else "anonymous"
    trusted = set(settings.TRUSTED_PROXIES)
    if peer not in trusted:
        return peer

    forwarded = request.headers.get("x-forwarded-for", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return peer


def rate_limited(scope: str) -> Callable:
    """Dependency factory: `Depends(rate_limited("contact"))`."""
    limiter = RateLimiter(scope)

    async def dependency(request: Request) -> None:
        result = await limiter.check(client_identifier(request))
        if not result.success:
            retry_after = max(int(result.reset - time.time()) + 1, 1)
            logger.warning("rate_limited", scope=scope, retry_after=retry_after)
            raise RateLimitExceeded("Too many requests. Please try again later.", retry_after=retry_after)

    return dependency
