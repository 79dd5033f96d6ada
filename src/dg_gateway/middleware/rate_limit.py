"""Fixed-window rate limiting for the public sync endpoint.

Redis INCR + EXPIRE, one window per minute:
    key   = "ratelimit:sync:{client_ip}"
    limit = settings.SYNC_RATE_LIMIT_PER_MINUTE

Exposed as a FastAPI dependency rather than middleware so it applies to
/sync only and can be overridden in tests.
"""

import logging

from fastapi import Request
from redis.exceptions import RedisError

from config.settings import settings
from src.dg_common.errors import RateLimitError
from src.dg_common.redis_client import get_redis

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def sync_rate_limit(request: Request) -> None:
    limit = settings.SYNC_RATE_LIMIT_PER_MINUTE
    if limit <= 0:
        return
    key = f"ratelimit:sync:{client_ip(request)}"
    try:
        redis = await get_redis()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, _WINDOW_SECONDS)
    except RedisError:
        # Fail open
        logger.warning("Rate limiter unavailable, allowing request", exc_info=True)
        return
    if count > limit:
        raise RateLimitError()
