# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Site API — Storefront settings of the resolved tenant.

Anyone may read the settings of the store they address; only that store's
admins may change them. A store that never saved settings reads the
defaults.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.api.deps import get_current_tenant, require_admin
from storeplex.core.tenant import Identity, TenantContext
from storeplex.storage.database import get_db
from storeplex.storage.models import SiteConfig
from storeplex.storage.repositories import DEFAULT_THEME, SiteConfigRepository, default_site_config

logger = logging.getLogger("storeplex.api.site")

router = APIRouter(prefix="/site", tags=["site"])

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class SiteTheme(BaseModel):
    primary_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    secondary_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    tertiary_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    general_text_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    footer_bg_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    footer_text_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    footer_link_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)


class SocialLink(BaseModel):
    model_config = {"str_strip_whitespace": True}

    platform: str = Field(min_length=1, max_length=64)
    url: str = Field(min_length=1, max_length=1024)
    icon_class: str = Field(default="", max_length=128)


class DeliveryFee(BaseModel):
    model_config = {"str_strip_whitespace": True}

    wilaya_id: int = Field(ge=1)
    wilaya_name: str = Field(min_length=1, max_length=128)
    price: float = Field(ge=0)


class SiteUpdateRequest(BaseModel):
    """Partial update: only the fields present in the body are written."""

    model_config = {"str_strip_whitespace": True}

    site_name: Optional[str] = Field(default=None, max_length=256)
    slogan: Optional[str] = Field(default=None, max_length=512)
    theme: Optional[SiteTheme] = None
    about_us_text: Optional[str] = Field(default=None, max_length=20000)
    about_us_image_url: Optional[str] = Field(default=None, max_length=1024)
    social_links: Optional[List[SocialLink]] = None
    delivery_fees: Optional[List[DeliveryFee]] = None
    current_data_index: Optional[int] = Field(default=None, ge=0)


class SiteResponse(BaseModel):
    tenant_id: int
    site_name: str
    slogan: str
    theme: SiteTheme
    about_us_text: str
    about_us_image_url: str
    social_links: List[SocialLink]
    delivery_fees: List[DeliveryFee]
    current_data_index: int


def _to_response(site: SiteConfig) -> SiteResponse:
    return SiteResponse(
        tenant_id=site.tenant_id,
        site_name=site.site_name or "",
        slogan=site.slogan or "",
        theme=SiteTheme(**{**DEFAULT_THEME, **(site.theme or {})}),
        about_us_text=site.about_us_text or "",
        about_us_image_url=site.about_us_image_url or "",
        social_links=site.social_links or [],
        delivery_fees=site.delivery_fees or [],
        current_data_index=site.current_data_index or 0,
    )


@router.get("", response_model=SiteResponse)
async def get_site(
    tenant: TenantContext = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    site = await SiteConfigRepository(db).get(tenant.tenant_id)
    if site is None:
        site = default_site_config(tenant.tenant_id)
    return _to_response(site)


@router.put("", response_model=SiteResponse)
async def update_site(
    req: SiteUpdateRequest,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Write the provided fields into the admin's own store settings."""
    values = req.model_dump(exclude_unset=True)
    if "theme" in values:
        # null colours leave the stored colour untouched
        values["theme"] = {k: v for k, v in (values["theme"] or {}).items() if v is not None}
    values = {k: v for k, v in values.items() if v is not None}

    site = await SiteConfigRepository(db).upsert(admin.tenant_id, **values)
    await db.commit()

    logger.info(
        "Site settings updated (%s)", ", ".join(sorted(values)) or "no fields",
        extra={"tenant_id": admin.tenant_id, "user_id": admin.subject_id},
    )
    return _to_response(site)
