# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Staff API — Admin-only management of the tenant's back-office accounts.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.api.deps import require_admin
from storeplex.auth.passwords import hash_password_async
from storeplex.auth.roles import ADMIN, validate_staff_role
from storeplex.core.config import settings
from storeplex.core.errors import AccountNotFound, DuplicateAccount, ValidationFailed
from storeplex.core.tenant import Identity
from storeplex.storage.database import get_db
from storeplex.storage.models import StaffUser
from storeplex.storage.repositories import StaffUserRepository, parse_uuid

logger = logging.getLogger("storeplex.api.staff")

router = APIRouter(prefix="/staff", tags=["staff"])


class StaffCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    email: EmailStr
    password: str = Field(min_length=settings.MIN_PASSWORD_LENGTH, max_length=256)
    role: str
    phone: Optional[str] = Field(default=None, max_length=32)


class StaffUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=256)
    role: Optional[str] = None
    is_active: Optional[bool] = None
    phone: Optional[str] = Field(default=None, max_length=32)


class StaffResponse(BaseModel):
    id: str
    tenant_id: int
    email: str
    name: str
    role: str
    is_active: bool


def _to_response(user: StaffUser) -> StaffResponse:
    return StaffResponse(
        id=str(user.id),
        tenant_id=user.tenant_id,
        email=user.email,
        name=user.name,
        role=user.role,
        is_active=user.is_active,
    )


@router.post("", response_model=StaffResponse, status_code=201)
async def create_staff(
    req: StaffCreateRequest,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a staff account in the admin's own tenant."""
    role = validate_staff_role(req.role)
    repo = StaffUserRepository(db)
    if await repo.get_by_email(admin.tenant_id, req.email):
        raise DuplicateAccount()

    password_hash = await hash_password_async(req.password)
    try:
        user = await repo.create(
            tenant_id=admin.tenant_id,
            email=req.email,
            password_hash=password_hash,
            role=role,
            name=req.name,
            phone=req.phone,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateAccount() from e

    logger.info(
        "Staff account %s created with role %s", user.email, role,
        extra={"tenant_id": admin.tenant_id, "user_id": admin.subject_id},
    )
    return _to_response(user)


@router.get("", response_model=List[StaffResponse])
async def list_staff(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    users = await StaffUserRepository(db).list_by_tenant(admin.tenant_id, limit=limit, offset=offset)
    return [_to_response(u) for u in users]


@router.patch("/{user_id}", response_model=StaffResponse)
async def update_staff(
    user_id: str,
    req: StaffUpdateRequest,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change role, active flag or name of a staff account in the same tenant."""
    if req.role is not None:
        validate_staff_role(req.role)
    target_id = parse_uuid(user_id)
    if target_id is not None and target_id == parse_uuid(admin.subject_id) and req.is_active is False:
        raise ValidationFailed("Admins cannot deactivate their own account")

    repo = StaffUserRepository(db)
    current = await repo.get(admin.tenant_id, user_id)
    if current is None:
        raise AccountNotFound()
    demoted = req.role is not None and req.role != ADMIN
    if current.role == ADMIN and current.is_active and (demoted or req.is_active is False):
        if await repo.count_active_admins(admin.tenant_id) <= 1:
            raise ValidationFailed("A client must keep at least one active admin")

    user = await repo.update(
        admin.tenant_id,
        user_id,
        role=req.role,
        is_active=req.is_active,
        name=req.name,
        phone=req.phone,
    )
    await db.commit()

    logger.info(
        "Staff account %s updated", user.email,
        extra={"tenant_id": admin.tenant_id, "user_id": admin.subject_id},
    )
    return _to_response(user)
