# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Provisioning API — Super-admin creation and lifecycle of client stores.

Guarded by the static X-Api-Key credential, not by tenant tokens: the
tenant does not exist yet when it is created. Responses never include the
signing secret or admin password.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from storeplex.api.deps import get_provisioning, require_super_admin
from storeplex.core.config import settings
from storeplex.storage.models import Tenant
from storeplex.tenancy.provisioning import ProvisioningOrchestrator

router = APIRouter(
    prefix="/provisioning",
    tags=["provisioning"],
    dependencies=[Depends(require_super_admin)],
)


class CloudinaryConfig(BaseModel):
    cloud_name: str = ""
    api_key: str = ""
    api_secret: str = ""


class ProvisionRequest(BaseModel):
    client_name: str = Field(min_length=1, max_length=256)
    handle: str = Field(min_length=1, max_length=63)
    admin_email: EmailStr
    admin_password: str = Field(min_length=settings.MIN_PASSWORD_LENGTH, max_length=256)
    admin_phone: Optional[str] = Field(default=None, max_length=32)
    cloudinary: Optional[CloudinaryConfig] = None
    config: Dict[str, Any] = Field(default_factory=dict)


class ProvisionResponse(BaseModel):
    tenant_id: int
    handle: str
    name: str
    admin_id: str
    admin_email: str


class TenantStatusRequest(BaseModel):
    is_active: bool


class TenantConfigRequest(BaseModel):
    config: Dict[str, Any]


class TenantSummary(BaseModel):
    tenant_id: int
    handle: str
    name: str
    is_active: bool


def _summary(tenant: Tenant) -> TenantSummary:
    return TenantSummary(
        tenant_id=tenant.tenant_id,
        handle=tenant.handle,
        name=tenant.name,
        is_active=tenant.is_active,
    )


@router.post("/clients", response_model=ProvisionResponse, status_code=201)
async def provision_client(
    req: ProvisionRequest,
    orchestrator: ProvisioningOrchestrator = Depends(get_provisioning),
):
    """Create a client store together with its first administrator."""
    config = dict(req.config)
    if req.cloudinary is not None:
        config["cloudinary"] = req.cloudinary.model_dump()

    result = await orchestrator.provision(
        client_name=req.client_name,
        handle=req.handle,
        admin_email=req.admin_email,
        admin_password=req.admin_password,
        extra_config=config,
        admin_phone=req.admin_phone,
    )
    return ProvisionResponse(
        tenant_id=result.tenant_id,
        handle=result.handle,
        name=result.name,
        admin_id=result.admin_id,
        admin_email=result.admin_email,
    )


@router.patch("/clients/{handle}/status", response_model=TenantSummary)
async def set_client_status(
    handle: str,
    req: TenantStatusRequest,
    orchestrator: ProvisioningOrchestrator = Depends(get_provisioning),
):
    """Soft-enable or soft-disable a client."""
    tenant = await orchestrator.set_active(handle, req.is_active)
    return _summary(tenant)


@router.post("/clients/{handle}/rotate-secret", response_model=TenantSummary)
async def rotate_client_secret(
    handle: str,
    orchestrator: ProvisioningOrchestrator = Depends(get_provisioning),
):
    """Rotate the signing secret, revoking every token of the client."""
    tenant = await orchestrator.rotate_signing_secret(handle)
    return _summary(tenant)


@router.put("/clients/{handle}/config", response_model=TenantSummary)
async def replace_client_config(
    handle: str,
    req: TenantConfigRequest,
    orchestrator: ProvisioningOrchestrator = Depends(get_provisioning),
):
    tenant = await orchestrator.update_config(handle, req.config)
    return _summary(tenant)
