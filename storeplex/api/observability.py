# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Observability API — Health check and metrics.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from storeplex.core.errors import SequenceUnavailable
from storeplex.core.metrics import platform_metrics
from storeplex.storage.database import ping_db
from storeplex.storage.redis_client import get_redis, ping_redis
from storeplex.storage.sequences import TENANT_ID_SEQUENCE, SequenceGenerator

logger = logging.getLogger("storeplex.api.observability")

router = APIRouter(tags=["observability"])

VERSION = "0.1.0"


@router.get("/health")
async def health_check():
    """Liveness plus a ping of both stores; 503 when either is down."""
    postgres_ok = await ping_db()
    redis_ok = await ping_redis()
    healthy = postgres_ok and redis_ok
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "version": VERSION,
            "postgres": "connected" if postgres_ok else "unavailable",
            "redis": "connected" if redis_ok else "unavailable",
        },
    )


@router.get("/api/metrics")
async def get_metrics():
    """Return current platform metrics."""
    try:
        last = await SequenceGenerator(get_redis()).current(TENANT_ID_SEQUENCE)
    except SequenceUnavailable:
        logger.warning("Sequence store unreachable; tenant id gauge not refreshed")
    else:
        if last is not None:
            platform_metrics.set_gauge("last_tenant_id", last)
    return platform_metrics.snapshot()
