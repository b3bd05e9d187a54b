# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Provisioning Orchestrator — Create a tenant and its first administrator.

Linear, no retries:
  1. reject duplicate client name / handle
  2. next tenant id from the ``tenantId`` sequence
  3. fresh random signing secret
  4. insert Tenant
  5. insert admin StaffUser (role = admin)
  6. commit

Steps 1-6 share one database transaction. The pre-check gives a friendly
answer in the common case; the unique constraints on tenants.handle and
tenants.name settle concurrent requests (IntegrityError -> DuplicateTenant).
A failure anywhere rolls back everything, so no Tenant is ever left
without its admin. A sequence value consumed by a rolled-back attempt is
simply skipped.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storeplex.auth.passwords import hash_password_async
from storeplex.auth.roles import ADMIN
from storeplex.core.config import settings
from storeplex.core.errors import (
    DuplicateTenant,
    ServerError,
    StoreplexError,
    TenantNotFound,
    ValidationFailed,
)
from storeplex.core.metrics import platform_metrics
from storeplex.storage.models import Tenant
from storeplex.storage.repositories import StaffUserRepository, TenantRepository
from storeplex.storage.sequences import TENANT_ID_SEQUENCE, SequenceGenerator

logger = logging.getLogger("storeplex.tenancy.provisioning")

HANDLE_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


@dataclass(frozen=True)
class ProvisionedTenant:
    """Public identifiers of a new tenant. Never carries secrets."""

    tenant_id: int
    handle: str
    name: str
    admin_id: str
    admin_email: str


def generate_signing_secret() -> str:
    return secrets.token_hex(settings.SIGNING_SECRET_BYTES)


def normalize_handle(handle: str) -> str:
    value = (handle or "").strip().lower()
    if not HANDLE_PATTERN.match(value):
        raise ValidationFailed(
            "Handle may only contain lowercase letters, digits and hyphens",
            details={"field": "handle"},
        )
    # all-digit values are read as tenant ids by TenantRepository.lookup
    if value.isdigit():
        raise ValidationFailed(
            "Handle cannot consist of digits only",
            details={"field": "handle"},
        )
    return value


class ProvisioningOrchestrator:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        sequences: SequenceGenerator,
        secret_factory: Callable[[], str] = generate_signing_secret,
    ) -> None:
        self._session_factory = session_factory
        self._sequences = sequences
        self._secret_factory = secret_factory

    async def provision(
        self,
        client_name: str,
        handle: str,
        admin_email: str,
        admin_password: str,
        extra_config: Optional[Dict[str, Any]] = None,
        admin_name: str = "Admin",
        admin_phone: Optional[str] = None,
    ) -> ProvisionedTenant:
        name = (client_name or "").strip()
        if not name:
            raise ValidationFailed("Client name is required", details={"field": "client_name"})
        handle = normalize_handle(handle)
        if len(admin_password or "") < settings.MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters",
                details={"field": "admin_password"},
            )

        # hash outside the transaction so no connection is held during bcrypt
        password_hash = await hash_password_async(admin_password)

        try:
            async with self._session_factory() as db:
                async with db.begin():
                    tenants = TenantRepository(db)
                    if await tenants.get_by_handle(handle) or await tenants.get_by_name(name):
                        raise DuplicateTenant(details={"name": name, "handle": handle})

                    tenant_id = await self._sequences.next(TENANT_ID_SEQUENCE)
                    tenant = await tenants.create(
                        tenant_id=tenant_id,
                        handle=handle,
                        name=name,
                        signing_secret=self._secret_factory(),
                        config=extra_config or {},
                    )
                    admin = await StaffUserRepository(db).create(
                        tenant_id=tenant.tenant_id,
                        email=admin_email,
                        password_hash=password_hash,
                        role=ADMIN,
                        name=admin_name,
                        phone=admin_phone,
                    )
                    result = ProvisionedTenant(
                        tenant_id=tenant.tenant_id,
                        handle=tenant.handle,
                        name=tenant.name,
                        admin_id=str(admin.id),
                        admin_email=admin.email,
                    )
        except StoreplexError:
            platform_metrics.inc("provisioning", label="rejected")
            raise
        except IntegrityError as e:
            platform_metrics.inc("provisioning", label="conflict")
            logger.info("Provisioning conflict for handle %r: %s", handle, e.orig)
            raise DuplicateTenant(details={"name": name, "handle": handle}) from e
        except Exception as e:
            platform_metrics.inc("provisioning", label="failed")
            logger.exception("Provisioning of %r failed and was rolled back", handle)
            raise ServerError("Server error during client provisioning") from e

        platform_metrics.inc("provisioning", label="ok")
        logger.info(
            "Provisioned client %s (%s)", result.handle, result.name,
            extra={"tenant_id": result.tenant_id},
        )
        return result

    # ── Lifecycle ───────────────────────────────────────────

    async def lookup_tenant(self, handle: str) -> Optional[Tenant]:
        async with self._session_factory() as db:
            return await TenantRepository(db).lookup(handle)

    async def set_active(self, handle: str, active: bool) -> Tenant:
        """Soft-enable or soft-disable a tenant."""
        async with self._session_factory() as db:
            async with db.begin():
                tenants = TenantRepository(db)
                tenant = await self._require(tenants, handle)
                await tenants.set_active(tenant.tenant_id, active)
                await db.refresh(tenant)
        logger.warning(
            "Client %s %s", tenant.handle, "activated" if active else "deactivated",
            extra={"tenant_id": tenant.tenant_id},
        )
        return tenant

    async def rotate_signing_secret(self, handle: str) -> Tenant:
        """Replace the signing secret; every outstanding token stops verifying."""
        async with self._session_factory() as db:
            async with db.begin():
                tenants = TenantRepository(db)
                tenant = await self._require(tenants, handle)
                await tenants.set_signing_secret(tenant.tenant_id, self._secret_factory())
                await db.refresh(tenant)
        logger.warning(
            "Rotated signing secret for client %s", tenant.handle,
            extra={"tenant_id": tenant.tenant_id},
        )
        return tenant

    async def update_config(self, handle: str, config: Dict[str, Any]) -> Tenant:
        """Replace the third-party credential bundle."""
        async with self._session_factory() as db:
            async with db.begin():
                tenants = TenantRepository(db)
                tenant = await self._require(tenants, handle)
                await tenants.update_config(tenant.tenant_id, config)
                await db.refresh(tenant)
        logger.info(
            "Updated config for client %s", tenant.handle,
            extra={"tenant_id": tenant.tenant_id},
        )
        return tenant

    @staticmethod
    async def _require(tenants: TenantRepository, handle: str) -> Tenant:
        tenant = await tenants.lookup(handle)
        if tenant is None:
            raise TenantNotFound(details={"identifier": handle})
        return tenant
