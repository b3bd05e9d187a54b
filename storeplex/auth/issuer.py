# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Credential Issuer — Password login for staff users and customers.

Lookups never leave the resolved tenant: an email registered under
another tenant is indistinguishable from an unknown one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.auth.passwords import verify_password_async
from storeplex.auth.roles import CUSTOMER_ROLE
from storeplex.auth.tokens import encode_token
from storeplex.core.errors import AccountInactive, InvalidCredentials
from storeplex.core.metrics import platform_metrics
from storeplex.core.tenant import CUSTOMER, IDENTITY_KINDS, STAFF, TenantContext
from storeplex.storage.repositories import CustomerRepository, StaffUserRepository

logger = logging.getLogger("storeplex.auth.issuer")


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime
    subject_id: str
    tenant_id: int
    role: str
    kind: str


class CredentialIssuer:
    def __init__(self, db: AsyncSession) -> None:
        self._staff = StaffUserRepository(db)
        self._customers = CustomerRepository(db)

    async def issue_token(
        self,
        tenant: TenantContext,
        kind: str,
        email: str,
        password: str,
    ) -> IssuedToken:
        """
        Authenticate (email, password) inside ``tenant`` and mint a token.

        Unknown identity and wrong password both raise the same
        InvalidCredentials; the unknown path still runs a bcrypt check.
        AccountInactive is only reported once the password has matched.
        """
        if kind not in IDENTITY_KINDS:
            raise ValueError(f"unknown identity kind: {kind!r}")

        if kind == STAFF:
            record = await self._staff.get_by_email(tenant.tenant_id, email)
            role = record.role if record else ""
        else:
            record = await self._customers.get_by_email(tenant.tenant_id, email)
            role = CUSTOMER_ROLE

        matched = await verify_password_async(
            password, record.password_hash if record else None
        )
        if not matched:
            platform_metrics.inc("login", label=f"{kind}:rejected")
            logger.info(
                "Login rejected (%s)", kind,
                extra={"tenant_id": tenant.tenant_id},
            )
            raise InvalidCredentials()

        if not record.is_active:
            platform_metrics.inc("login", label=f"{kind}:inactive")
            logger.info(
                "Login for disabled %s account", kind,
                extra={"tenant_id": tenant.tenant_id, "user_id": str(record.id)},
            )
            raise AccountInactive()

        token, expires_at = encode_token(
            tenant.signing_secret,
            subject_id=str(record.id),
            tenant_id=tenant.tenant_id,
            role=role,
            kind=kind,
        )
        platform_metrics.inc("login", label=f"{kind}:ok")
        logger.info(
            "Issued %s token", kind,
            extra={"tenant_id": tenant.tenant_id, "user_id": str(record.id)},
        )
        return IssuedToken(
            token=token,
            expires_at=expires_at,
            subject_id=str(record.id),
            tenant_id=tenant.tenant_id,
            role=role,
            kind=kind,
        )

    async def issue_staff_token(self, tenant: TenantContext, email: str, password: str) -> IssuedToken:
        return await self.issue_token(tenant, STAFF, email, password)

    async def issue_customer_token(self, tenant: TenantContext, email: str, password: str) -> IssuedToken:
        return await self.issue_token(tenant, CUSTOMER, email, password)
