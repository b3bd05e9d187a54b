# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Database — One async engine per process and the sessions bound to it.

The URL comes from ``DATABASE_URL``: asyncpg for PostgreSQL, aiosqlite for
local runs. Tests swap the engine with :func:`bind_engine`.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from storeplex.core.config import settings

logger = logging.getLogger("storeplex.storage.database")


class Base(DeclarativeBase):
    pass


_engine: Optional[AsyncEngine] = None
_sessions: Optional[async_sessionmaker[AsyncSession]] = None


def _sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # rows stay readable after commit; routes return them after writing
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


def bind_engine(engine: AsyncEngine) -> None:
    """Route every new session to ``engine``."""
    global _engine, _sessions
    _engine = engine
    _sessions = _sessionmaker(engine)


def get_engine() -> AsyncEngine:
    if _engine is None:
        options = {"pool_pre_ping": True}
        if not settings.DATABASE_URL.startswith("sqlite"):
            options.update(pool_size=settings.DB_POOL_SIZE, max_overflow=5)
        bind_engine(create_async_engine(settings.DATABASE_URL, **options))
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _sessions is None:
        get_engine()
    return _sessions


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; rolled back when the handler raises."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Fail startup early when PostgreSQL is unreachable."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def ping_db() -> bool:
    try:
        await init_db()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database ping failed: %s", e)
        return False
    return True


async def close_db() -> None:
    global _engine, _sessions
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessions = None


async def create_all_tables() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
