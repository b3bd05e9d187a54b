# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
API Dependencies — The request pipeline as FastAPI dependencies.

    get_current_tenant -> require_staff / require_customer -> require_roles(...)

Provisioning routes bypass tenant resolution and use require_super_admin.
"""

from __future__ import annotations

import hmac
import logging
from typing import Callable, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.auth.roles import ADMIN, authorize
from storeplex.auth.verifier import CredentialVerifier
from storeplex.core.config import settings
from storeplex.core.errors import Forbidden, ServerMisconfigured
from storeplex.core.tenant import CUSTOMER, STAFF, Identity, TenantContext
from storeplex.storage.database import get_db, get_session_factory
from storeplex.storage.redis_client import get_redis
from storeplex.storage.repositories import TenantRepository
from storeplex.storage.sequences import SequenceGenerator
from storeplex.tenancy.provisioning import ProvisioningOrchestrator
from storeplex.tenancy.resolver import TenantResolver

logger = logging.getLogger("storeplex.api.deps")


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    parts = authorization.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


async def get_current_tenant(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> TenantContext:
    """
    Resolve the tenant from the tenant header, falling back to the Host
    subdomain, and attach it to ``request.state.tenant``.
    """
    resolver = TenantResolver(TenantRepository(db))
    tenant = await resolver.resolve(
        request.headers.get(settings.TENANT_HEADER),
        request.headers.get("host"),
    )
    request.state.tenant = tenant
    return tenant


async def _verify(request: Request, db: AsyncSession, expected_kind: str) -> Identity:
    tenant = getattr(request.state, "tenant", None)
    identity = await CredentialVerifier(db).verify(
        tenant,
        bearer_token(request.headers.get("Authorization")),
        expected_kind,
    )
    request.state.identity = identity
    return identity


async def require_staff(
    request: Request,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Staff-only routes: a valid staff token for the resolved tenant."""
    return await _verify(request, db, STAFF)


async def require_customer(
    request: Request,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Customer-only routes: a valid customer token for the resolved tenant."""
    return await _verify(request, db, CUSTOMER)


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency that verifies a staff token and applies the role gate.

    Usage:
        @router.get("/staff")
        async def list_staff(identity: Identity = Depends(require_roles("admin"))):
            ...
    """
    async def _gate(identity: Identity = Depends(require_staff)) -> Identity:
        authorize(identity, roles)
        return identity

    return _gate


require_admin = require_roles(ADMIN)


async def require_super_admin(
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key"),
) -> None:
    """Out-of-band credential for tenant provisioning."""
    expected = settings.SUPER_ADMIN_API_KEY
    if not expected:
        logger.critical("SUPER_ADMIN_API_KEY is not set; provisioning is disabled")
        raise ServerMisconfigured()
    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), expected.encode()):
        raise Forbidden()


def get_sequences() -> SequenceGenerator:
    return SequenceGenerator(get_redis())


def get_provisioning(
    sequences: SequenceGenerator = Depends(get_sequences),
) -> ProvisioningOrchestrator:
    return ProvisioningOrchestrator(get_session_factory(), sequences)
