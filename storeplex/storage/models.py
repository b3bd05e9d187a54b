# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
ORM Models — Table definitions for the tenant core.

Tables:
  - tenants:     one row per client store, with its signing secret
  - staff_users: back-office operators, unique per (tenant_id, email)
  - customers:   shoppers, unique per (tenant_id, email)
  - site_configs: storefront settings, at most one row per tenant

Sequences live in Redis, not here (see storeplex.storage.sequences).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, String,
    Text, UniqueConstraint, Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB

from storeplex.storage.database import Base

_JSON = JSON().with_variant(JSONB(), "postgresql")


def _utcnow():
    return datetime.now(timezone.utc)


# ── Tenants ─────────────────────────────────────────────────

class Tenant(Base):
    __tablename__ = "tenants"

    tenant_id = Column(Integer, primary_key=True, autoincrement=False)
    handle = Column(String(63), nullable=False, unique=True, index=True)
    name = Column(String(256), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    signing_secret = Column(String(256), nullable=True)
    config = Column(_JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<Tenant {self.tenant_id} handle={self.handle} active={self.is_active}>"


# ── Staff Users ─────────────────────────────────────────────

class StaffUser(Base):
    __tablename__ = "staff_users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Integer, ForeignKey("tenants.tenant_id"), nullable=False, index=True)
    email = Column(String(320), nullable=False)
    name = Column(String(256), nullable=False, default="")
    phone = Column(String(32), nullable=True)
    role = Column(String(32), nullable=False)
    password_hash = Column(String(128), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_staff_tenant_email"),
    )

    def __repr__(self):
        return f"<StaffUser {self.email} tenant={self.tenant_id} role={self.role}>"


# ── Customers ───────────────────────────────────────────────

class Customer(Base):
    __tablename__ = "customers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Integer, ForeignKey("tenants.tenant_id"), nullable=False, index=True)
    email = Column(String(320), nullable=False)
    name = Column(String(256), nullable=False, default="")
    phone = Column(String(32), nullable=True)
    password_hash = Column(String(128), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_customer_tenant_email"),
    )

    def __repr__(self):
        return f"<Customer {self.email} tenant={self.tenant_id}>"


# ── Site Configs ────────────────────────────────────────────

class SiteConfig(Base):
    __tablename__ = "site_configs"

    tenant_id = Column(Integer, ForeignKey("tenants.tenant_id"), primary_key=True, autoincrement=False)
    site_name = Column(String(256), nullable=False, default="")
    slogan = Column(String(512), nullable=False, default="")
    theme = Column(_JSON, nullable=False, default=dict)
    about_us_text = Column(Text, nullable=False, default="")
    about_us_image_url = Column(String(1024), nullable=False, default="")
    social_links = Column(_JSON, nullable=False, default=list)
    delivery_fees = Column(_JSON, nullable=False, default=list)
    current_data_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<SiteConfig tenant={self.tenant_id} name={self.site_name}>"
