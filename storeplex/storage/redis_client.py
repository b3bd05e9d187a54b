# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Redis Connection Factory — Shared async pool for counter storage.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as aioredis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry
from redis.exceptions import (
    BusyLoadingError,
    ConnectionError,
    TimeoutError,
)

from storeplex.core.config import settings

_pool: Optional[aioredis.Redis] = None

_RETRY = Retry(ExponentialBackoff(cap=2, base=0.1), retries=3)
_RETRY_ERRORS = [ConnectionError, TimeoutError, BusyLoadingError]


def get_redis() -> aioredis.Redis:
    """
    Return the process-wide async Redis client, creating it on first use.

    Socket timeouts bound every call so a stalled Redis surfaces as a
    transient error instead of a hung request.
    """
    global _pool
    if _pool is None:
        _pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            max_connections=20,
            health_check_interval=15,
            retry_on_error=_RETRY_ERRORS,
            retry=_RETRY,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
    return _pool


async def ping_redis() -> bool:
    try:
        return bool(await get_redis().ping())
    except (ConnectionError, TimeoutError, OSError):
        return False


async def close_redis() -> None:
    """Gracefully close the Redis connection pool."""
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None


def inject_redis_for_test(redis_instance: Optional[aioredis.Redis]) -> None:
    """Inject a fake Redis instance (for testing only)."""
    global _pool
    _pool = redis_instance
