# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Sequence Generator — Atomic named counters.

Used to assign collision-free tenant ids under concurrent provisioning.

Each call runs ``SET key <baseline> NX`` and ``INCR key`` inside one
MULTI/EXEC block, so creation-at-baseline and increment happen in a single
atomic step on the server. With the default baseline of 1000 the first
value handed out is 1001.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from storeplex.core.config import settings
from storeplex.core.errors import SequenceUnavailable

logger = logging.getLogger("storeplex.sequences")

TENANT_ID_SEQUENCE = "tenantId"


def sequence_key(name: str) -> str:
    """
    Build the Redis key for a named sequence.

    Example:
        sequence_key("tenantId") -> "storeplex:seq:tenantId"
    """
    return f"storeplex:seq:{name}"


class SequenceGenerator:
    """Hands out monotonically increasing integers per sequence name."""

    def __init__(self, redis: aioredis.Redis, baseline: Optional[int] = None) -> None:
        self._redis = redis
        self._baseline = settings.SEQUENCE_BASELINE if baseline is None else baseline

    async def next(self, name: str) -> int:
        """
        Increment and return the sequence value.

        Raises SequenceUnavailable if Redis cannot be reached. In that case
        the caller cannot know whether a value was consumed.
        """
        if not name:
            raise ValueError("sequence name must not be empty")
        key = sequence_key(name)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(key, self._baseline, nx=True)
                pipe.incr(key)
                _, value = await pipe.execute()
        except (RedisError, OSError) as e:
            logger.error("Sequence %s unavailable: %s", name, e)
            raise SequenceUnavailable(details={"sequence": name}) from e

        logger.debug("Sequence %s -> %d", name, value)
        return int(value)

    async def current(self, name: str) -> Optional[int]:
        """Last issued value, or None if the sequence was never used."""
        try:
            raw = await self._redis.get(sequence_key(name))
        except (RedisError, OSError) as e:
            raise SequenceUnavailable(details={"sequence": name}) from e
        return int(raw) if raw is not None else None
