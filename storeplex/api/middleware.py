# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
API Middleware — Trace ID propagation and request timing.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from storeplex.core.metrics import platform_metrics

logger = logging.getLogger("storeplex.api")


class TraceMiddleware(BaseHTTPMiddleware):
    """
    Generates or propagates X-Trace-Id header for every request.
    Also logs request duration, tagged with the tenant once resolved.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get("X-Trace-Id") or str(uuid.uuid4())
        request.state.trace_id = trace_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000

        response.headers["X-Trace-Id"] = trace_id
        platform_metrics.inc("http_requests", label=str(response.status_code))
        platform_metrics.observe_ms("http_request", elapsed)

        tenant = getattr(request.state, "tenant", None)
        logger.info(
            "[api] %s %s -> %d (%.0fms)",
            request.method, request.url.path, response.status_code, elapsed,
            extra={
                "trace_id": trace_id,
                "tenant_id": tenant.tenant_id if tenant else None,
            },
        )
        return response
