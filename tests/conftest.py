# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Shared test fixtures for all Storeplex tests.

Storage runs on FakeRedis and an in-memory SQLite database, so no external
services are needed.
"""

from typing import Any, Dict, Optional

import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import storeplex.storage.models  # noqa: F401
from storeplex.auth.passwords import hash_password
from storeplex.core.config import settings
from storeplex.core.metrics import platform_metrics
from storeplex.storage.database import Base, get_session_factory, bind_engine
from storeplex.storage.redis_client import inject_redis_for_test
from storeplex.storage.repositories import (
    CustomerRepository,
    StaffUserRepository,
    TenantRepository,
)
from storeplex.storage.sequences import SequenceGenerator
from storeplex.tenancy.provisioning import ProvisioningOrchestrator

SUPER_KEY = "test-super-admin-key"
ACME_SECRET = "acme-signing-secret-0123456789abcdef"
GLOBEX_SECRET = "globex-signing-secret-0123456789abcdef"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Cheap bcrypt, a known super-admin key, clean counters."""
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(settings, "SUPER_ADMIN_API_KEY", SUPER_KEY)
    monkeypatch.setattr(settings, "BASE_DOMAIN", "")
    platform_metrics.reset()
    return settings


@pytest.fixture
def mock_redis():
    """Provide a FakeRedis async instance wired in as the shared client."""
    r = fakeredis.aioredis.FakeRedis(decode_responses=True)
    inject_redis_for_test(r)
    yield r
    inject_redis_for_test(None)


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema, injected as the platform engine."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    bind_engine(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
def sequences(mock_redis):
    return SequenceGenerator(mock_redis)


@pytest.fixture
def orchestrator(db_engine, sequences):
    return ProvisioningOrchestrator(get_session_factory(), sequences)


# ── Seeding helpers ─────────────────────────────────────────

@pytest.fixture
def make_tenant(db_engine):
    async def _make(
        tenant_id: int = 1001,
        handle: str = "acme",
        name: Optional[str] = None,
        signing_secret: Optional[str] = ACME_SECRET,
        is_active: bool = True,
        config: Optional[Dict[str, Any]] = None,
    ):
        async with get_session_factory()() as db:
            async with db.begin():
                repo = TenantRepository(db)
                tenant = await repo.create(
                    tenant_id=tenant_id,
                    handle=handle,
                    name=name or handle.title(),
                    signing_secret=signing_secret,
                    config=config,
                )
                if not is_active:
                    await repo.set_active(tenant_id, False)
        return tenant

    return _make


@pytest.fixture
def make_staff(db_engine):
    async def _make(
        tenant_id: int,
        email: str,
        password: str = "correct-horse",
        role: str = "admin",
        is_active: bool = True,
    ):
        async with get_session_factory()() as db:
            async with db.begin():
                repo = StaffUserRepository(db)
                user = await repo.create(
                    tenant_id=tenant_id,
                    email=email,
                    password_hash=hash_password(password),
                    role=role,
                    name=email.split("@")[0],
                )
                if not is_active:
                    await repo.update(tenant_id, user.id, is_active=False)
        return user

    return _make


@pytest.fixture
def make_customer(db_engine):
    async def _make(
        tenant_id: int,
        email: str,
        password: str = "correct-horse",
        is_active: bool = True,
    ):
        async with get_session_factory()() as db:
            async with db.begin():
                repo = CustomerRepository(db)
                customer = await repo.create(
                    tenant_id=tenant_id,
                    email=email,
                    password_hash=hash_password(password),
                    name=email.split("@")[0],
                )
                if not is_active:
                    await repo.set_active(tenant_id, customer.id, False)
        return customer

    return _make


# ── HTTP client ─────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(db_engine, mock_redis):
    from storeplex.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
