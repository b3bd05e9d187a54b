# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Auth API — Staff and customer login, customer self-registration.

All routes run inside a resolved tenant (X-Tenant-Id header or subdomain).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.api.deps import get_current_tenant, require_customer, require_staff
from storeplex.auth.issuer import CredentialIssuer, IssuedToken
from storeplex.auth.passwords import hash_password_async
from storeplex.core.config import settings
from storeplex.core.errors import DuplicateAccount
from storeplex.core.tenant import Identity, TenantContext
from storeplex.storage.database import get_db
from storeplex.storage.repositories import CustomerRepository

logger = logging.getLogger("storeplex.api.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)


class CustomerRegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    email: EmailStr
    password: str = Field(min_length=settings.MIN_PASSWORD_LENGTH, max_length=256)
    phone: Optional[str] = Field(default=None, max_length=32)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: str
    tenant_id: int
    role: str


class IdentityResponse(BaseModel):
    user_id: str
    tenant_id: int
    role: str
    kind: str
    email: str


def _token_response(issued: IssuedToken) -> TokenResponse:
    return TokenResponse(
        access_token=issued.token,
        expires_at=issued.expires_at,
        user_id=issued.subject_id,
        tenant_id=issued.tenant_id,
        role=issued.role,
    )


def _identity_response(identity: Identity) -> IdentityResponse:
    return IdentityResponse(
        user_id=identity.subject_id,
        tenant_id=identity.tenant_id,
        role=identity.role,
        kind=identity.kind,
        email=identity.email,
    )


@router.post("/staff/login", response_model=TokenResponse)
async def staff_login(
    req: LoginRequest,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Authenticate a staff user of the resolved tenant."""
    issued = await CredentialIssuer(db).issue_staff_token(tenant, req.email, req.password)
    return _token_response(issued)


@router.get("/me", response_model=IdentityResponse)
async def staff_me(identity: Identity = Depends(require_staff)):
    return _identity_response(identity)


@router.post("/customers/register", response_model=IdentityResponse, status_code=201)
async def customer_register(
    req: CustomerRegisterRequest,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Create a shopper account in the resolved tenant."""
    repo = CustomerRepository(db)
    if await repo.get_by_email(tenant.tenant_id, req.email):
        raise DuplicateAccount()

    password_hash = await hash_password_async(req.password)
    try:
        customer = await repo.create(
            tenant_id=tenant.tenant_id,
            email=req.email,
            password_hash=password_hash,
            name=req.name,
            phone=req.phone,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateAccount() from e

    logger.info(
        "Customer registered",
        extra={"tenant_id": tenant.tenant_id, "user_id": str(customer.id)},
    )
    return IdentityResponse(
        user_id=str(customer.id),
        tenant_id=tenant.tenant_id,
        role="customer",
        kind="customer",
        email=customer.email,
    )


@router.post("/customers/login", response_model=TokenResponse)
async def customer_login(
    req: LoginRequest,
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Authenticate a customer of the resolved tenant."""
    issued = await CredentialIssuer(db).issue_customer_token(tenant, req.email, req.password)
    return _token_response(issued)


@router.get("/customers/me", response_model=IdentityResponse)
async def customer_me(identity: Identity = Depends(require_customer)):
    return _identity_response(identity)
