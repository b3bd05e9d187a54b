# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Customers API — Admin view of the tenant's shoppers.

Disabling a customer takes effect on their next request: the verifier
rejects tokens whose account is no longer active.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.api.deps import require_admin
from storeplex.core.errors import AccountNotFound
from storeplex.core.tenant import Identity
from storeplex.storage.database import get_db
from storeplex.storage.models import Customer
from storeplex.storage.repositories import CustomerRepository

logger = logging.getLogger("storeplex.api.customers")

router = APIRouter(prefix="/customers", tags=["customers"])


class CustomerStatusRequest(BaseModel):
    is_active: bool


class CustomerResponse(BaseModel):
    id: str
    tenant_id: int
    email: str
    name: str
    phone: Optional[str] = None
    is_active: bool


def _to_response(customer: Customer) -> CustomerResponse:
    return CustomerResponse(
        id=str(customer.id),
        tenant_id=customer.tenant_id,
        email=customer.email,
        name=customer.name,
        phone=customer.phone,
        is_active=customer.is_active,
    )


@router.get("", response_model=List[CustomerResponse])
async def list_customers(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    customers = await CustomerRepository(db).list_by_tenant(admin.tenant_id, limit=limit, offset=offset)
    return [_to_response(c) for c in customers]


@router.patch("/{customer_id}/status", response_model=CustomerResponse)
async def set_customer_status(
    customer_id: str,
    req: CustomerStatusRequest,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Enable or disable a customer of the admin's own tenant."""
    customer = await CustomerRepository(db).set_active(admin.tenant_id, customer_id, req.is_active)
    if customer is None:
        raise AccountNotFound()
    await db.commit()

    logger.info(
        "Customer %s %s", customer.email, "enabled" if req.is_active else "disabled",
        extra={"tenant_id": admin.tenant_id, "user_id": admin.subject_id},
    )
    return _to_response(customer)
