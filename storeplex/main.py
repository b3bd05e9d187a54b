# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Storeplex Application Entry Point.

FastAPI app with lifespan, middleware, error handlers and API routers.

    uvicorn storeplex.main:app
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from storeplex.api.auth import router as auth_router
from storeplex.api.customers import router as customers_router
from storeplex.api.errors import storeplex_error_handler, validation_error_handler
from storeplex.api.middleware import TraceMiddleware
from storeplex.api.observability import VERSION, router as observability_router
from storeplex.api.provisioning import router as provisioning_router
from storeplex.api.site import router as site_router
from storeplex.api.staff import router as staff_router
from storeplex.core.config import settings
from storeplex.core.errors import StoreplexError
from storeplex.core.logging import setup_logging
from storeplex.storage.database import close_db, init_db
from storeplex.storage.redis_client import close_redis, get_redis

logger = logging.getLogger("storeplex.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup/shutdown of platform resources."""
    setup_logging(settings.LOG_LEVEL)
    await init_db()
    await get_redis().ping()
    if not settings.SUPER_ADMIN_API_KEY:
        logger.warning("SUPER_ADMIN_API_KEY is not set; provisioning endpoints will refuse requests")
    logger.info("[Storeplex] Platform ready (env=%s)", settings.STOREPLEX_ENV)
    yield
    await close_redis()
    await close_db()
    logger.info("[Storeplex] Shutdown complete")


app = FastAPI(
    title="Storeplex",
    description="Multi-tenant e-commerce back-office core",
    version=VERSION,
    lifespan=lifespan,
)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(TraceMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Error Handlers ──────────────────────────────────────────
app.add_exception_handler(StoreplexError, storeplex_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# ── Routes ──────────────────────────────────────────────────
app.include_router(auth_router, prefix="/api")
app.include_router(staff_router, prefix="/api")
app.include_router(customers_router, prefix="/api")
app.include_router(site_router, prefix="/api")
app.include_router(provisioning_router, prefix="/api")
app.include_router(observability_router)
