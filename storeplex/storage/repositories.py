# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Repository Layer — Tenant-scoped access to the core tables.

Each repository takes an AsyncSession and never commits; the caller owns
the transaction. Every staff, customer and site query filters on tenant_id.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storeplex.auth.roles import ADMIN
from storeplex.storage.models import Customer, SiteConfig, StaffUser, Tenant


def parse_uuid(value: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ── Tenant Repository ───────────────────────────────────────

class TenantRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        tenant_id: int,
        handle: str,
        name: str,
        signing_secret: str,
        config: Optional[Dict[str, Any]] = None,
    ) -> Tenant:
        tenant = Tenant(
            tenant_id=tenant_id,
            handle=handle,
            name=name,
            signing_secret=signing_secret,
            config=config or {},
            is_active=True,
        )
        self.db.add(tenant)
        await self.db.flush()
        return tenant

    async def get_by_tenant_id(self, tenant_id: int) -> Optional[Tenant]:
        result = await self.db.execute(
            select(Tenant).where(Tenant.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_by_handle(self, handle: str) -> Optional[Tenant]:
        result = await self.db.execute(
            select(Tenant).where(Tenant.handle == handle.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[Tenant]:
        result = await self.db.execute(
            select(Tenant).where(Tenant.name == name.strip())
        )
        return result.scalar_one_or_none()

    async def lookup(self, identifier: str) -> Optional[Tenant]:
        """Numeric identifiers match tenant_id, anything else matches handle."""
        identifier = identifier.strip()
        if identifier.isdigit():
            return await self.get_by_tenant_id(int(identifier))
        return await self.get_by_handle(identifier)

    async def set_active(self, tenant_id: int, active: bool) -> None:
        await self.db.execute(
            update(Tenant)
            .where(Tenant.tenant_id == tenant_id)
            .values(is_active=active, updated_at=datetime.now(timezone.utc))
        )

    async def set_signing_secret(self, tenant_id: int, secret: str) -> None:
        await self.db.execute(
            update(Tenant)
            .where(Tenant.tenant_id == tenant_id)
            .values(signing_secret=secret, updated_at=datetime.now(timezone.utc))
        )

    async def update_config(self, tenant_id: int, config: Dict[str, Any]) -> None:
        await self.db.execute(
            update(Tenant)
            .where(Tenant.tenant_id == tenant_id)
            .values(config=config, updated_at=datetime.now(timezone.utc))
        )


# ── Staff User Repository ───────────────────────────────────

class StaffUserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        tenant_id: int,
        email: str,
        password_hash: str,
        role: str,
        name: str = "",
        phone: Optional[str] = None,
    ) -> StaffUser:
        user = StaffUser(
            tenant_id=tenant_id,
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
            name=name,
            phone=phone,
            is_active=True,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def get(self, tenant_id: int, user_id: Union[str, uuid.UUID]) -> Optional[StaffUser]:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        result = await self.db.execute(
            select(StaffUser).where(
                StaffUser.tenant_id == tenant_id,
                StaffUser.id == uid,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, tenant_id: int, email: str) -> Optional[StaffUser]:
        result = await self.db.execute(
            select(StaffUser).where(
                StaffUser.tenant_id == tenant_id,
                StaffUser.email == normalize_email(email),
            )
        )
        return result.scalar_one_or_none()

    async def list_by_tenant(
        self, tenant_id: int, limit: int = 50, offset: int = 0
    ) -> List[StaffUser]:
        result = await self.db.execute(
            select(StaffUser)
            .where(StaffUser.tenant_id == tenant_id)
            .order_by(StaffUser.created_at.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def count_active_admins(self, tenant_id: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(StaffUser)
            .where(
                StaffUser.tenant_id == tenant_id,
                StaffUser.role == ADMIN,
                StaffUser.is_active.is_(True),
            )
        )
        return result.scalar_one()

    async def update(
        self,
        tenant_id: int,
        user_id: Union[str, uuid.UUID],
        **values: Any,
    ) -> Optional[StaffUser]:
        """Apply role/active/name changes; returns None outside the tenant."""
        user = await self.get(tenant_id, user_id)
        if user is None:
            return None
        for key in ("role", "is_active", "name", "phone"):
            if values.get(key) is not None:
                setattr(user, key, values[key])
        await self.db.flush()
        return user


# ── Customer Repository ─────────────────────────────────────

class CustomerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        tenant_id: int,
        email: str,
        password_hash: str,
        name: str = "",
        phone: Optional[str] = None,
    ) -> Customer:
        customer = Customer(
            tenant_id=tenant_id,
            email=normalize_email(email),
            password_hash=password_hash,
            name=name,
            phone=phone,
            is_active=True,
        )
        self.db.add(customer)
        await self.db.flush()
        return customer

    async def get(self, tenant_id: int, customer_id: Union[str, uuid.UUID]) -> Optional[Customer]:
        cid = parse_uuid(customer_id)
        if cid is None:
            return None
        result = await self.db.execute(
            select(Customer).where(
                Customer.tenant_id == tenant_id,
                Customer.id == cid,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, tenant_id: int, email: str) -> Optional[Customer]:
        result = await self.db.execute(
            select(Customer).where(
                Customer.tenant_id == tenant_id,
                Customer.email == normalize_email(email),
            )
        )
        return result.scalar_one_or_none()

    async def list_by_tenant(
        self, tenant_id: int, limit: int = 50, offset: int = 0
    ) -> List[Customer]:
        result = await self.db.execute(
            select(Customer)
            .where(Customer.tenant_id == tenant_id)
            .order_by(Customer.created_at.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def set_active(
        self, tenant_id: int, customer_id: Union[str, uuid.UUID], active: bool
    ) -> Optional[Customer]:
        """Enable or disable a customer; returns None outside the tenant."""
        customer = await self.get(tenant_id, customer_id)
        if customer is None:
            return None
        customer.is_active = active
        await self.db.flush()
        return customer


# ── Site Config Repository ──────────────────────────────────

DEFAULT_THEME: Dict[str, str] = {
    "primary_color": "#C8797D",
    "secondary_color": "#A85F64",
    "tertiary_color": "#FDF5E6",
    "general_text_color": "#4A4A4A",
    "footer_bg_color": "#4A4A4A",
    "footer_text_color": "#DDCACA",
    "footer_link_color": "#E6B89C",
}

SITE_FIELDS = (
    "site_name", "slogan", "theme", "about_us_text", "about_us_image_url",
    "social_links", "delivery_fees", "current_data_index",
)


def default_site_config(tenant_id: int) -> SiteConfig:
    """Transient config carrying the defaults; not added to any session."""
    return SiteConfig(
        tenant_id=tenant_id,
        site_name="",
        slogan="",
        theme=dict(DEFAULT_THEME),
        about_us_text="",
        about_us_image_url="",
        social_links=[],
        delivery_fees=[],
        current_data_index=0,
    )


class SiteConfigRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, tenant_id: int) -> Optional[SiteConfig]:
        return await self.db.get(SiteConfig, tenant_id)

    async def upsert(self, tenant_id: int, **values: Any) -> SiteConfig:
        """
        Apply the given fields to the tenant's config, creating it from the
        defaults on first write. Theme colours merge into the stored theme.
        """
        site = await self.get(tenant_id)
        if site is None:
            site = default_site_config(tenant_id)
            self.db.add(site)
        for key in SITE_FIELDS:
            if key not in values:
                continue
            if key == "theme":
                site.theme = {**(site.theme or {}), **values["theme"]}
            else:
                setattr(site, key, values[key])
        await self.db.flush()
        return site
