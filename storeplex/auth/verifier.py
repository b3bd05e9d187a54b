# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Credential Verifier — Re-derive the acting identity from a bearer token.

Order of checks:
  1. token present                        -> MissingToken
  2. signature under the tenant's secret  -> InvalidToken / TokenExpired
  3. token minted for this tenant         -> InvalidToken
  4. identity class matches the route     -> IdentityMismatch
  5. subject still active in this tenant  -> IdentityNotFound
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.auth.tokens import decode_token
from storeplex.core.errors import (
    IdentityMismatch,
    IdentityNotFound,
    InvalidToken,
    MissingToken,
    ServerMisconfigured,
)
from storeplex.core.tenant import STAFF, Identity, TenantContext
from storeplex.storage.repositories import CustomerRepository, StaffUserRepository

logger = logging.getLogger("storeplex.auth.verifier")


class CredentialVerifier:
    def __init__(self, db: AsyncSession) -> None:
        self._staff = StaffUserRepository(db)
        self._customers = CustomerRepository(db)

    async def verify(
        self,
        tenant: Optional[TenantContext],
        token: Optional[str],
        expected_kind: str,
    ) -> Identity:
        if tenant is None:
            # never verify without a tenant scope
            logger.error("Credential verification invoked without a resolved tenant")
            raise ServerMisconfigured(details={"stage": "verify"})
        if not token:
            raise MissingToken()

        claims = decode_token(token, tenant.signing_secret)

        if claims.tid != tenant.tenant_id:
            logger.warning(
                "Token for tenant %s presented to tenant %s",
                claims.tid, tenant.tenant_id,
                extra={"tenant_id": tenant.tenant_id},
            )
            raise InvalidToken(details={"reason": "TenantMismatch"})

        if claims.kind != expected_kind:
            raise IdentityMismatch(details={"expected": expected_kind, "got": claims.kind})

        if expected_kind == STAFF:
            record = await self._staff.get(tenant.tenant_id, claims.sub)
            role = record.role if record else None
        else:
            record = await self._customers.get(tenant.tenant_id, claims.sub)
            role = claims.role

        if record is None or not record.is_active:
            logger.info(
                "Token subject no longer active",
                extra={"tenant_id": tenant.tenant_id, "user_id": claims.sub},
            )
            raise IdentityNotFound()

        return Identity(
            subject_id=str(record.id),
            tenant_id=tenant.tenant_id,
            role=role,
            kind=expected_kind,
            email=record.email,
        )
