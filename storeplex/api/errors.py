# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
API Error Handling — Unified error structure.

Every StoreplexError becomes:
    {"code": ..., "message": ..., "trace_id": ..., "details": {...}}
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storeplex.core.errors import StoreplexError

logger = logging.getLogger("storeplex.api.errors")


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or str(uuid.uuid4())


async def storeplex_error_handler(request: Request, exc: StoreplexError) -> JSONResponse:
    """Global exception handler for StoreplexError."""
    trace_id = _trace_id(request)
    if exc.status_code >= 500:
        logger.error(
            "[api] %s %s failed: %s (%s)",
            request.method, request.url.path, exc.code, exc.message,
            extra={"trace_id": trace_id},
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.code,
            "message": exc.message,
            "trace_id": trace_id,
            "details": exc.details,
        },
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies use the same envelope as domain errors."""
    return JSONResponse(
        status_code=422,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "trace_id": _trace_id(request),
            "details": {"errors": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ]},
        },
    )
