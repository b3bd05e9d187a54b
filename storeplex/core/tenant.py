# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Tenant Context — Multi-tenancy support.

Every data access in Storeplex is scoped to a tenant_id.
TenantContext carries the resolved tenant (and its signing secret) through
the request; Identity carries the verified caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

STAFF = "staff"
CUSTOMER = "customer"
IDENTITY_KINDS = (STAFF, CUSTOMER)


@dataclass(frozen=True)
class TenantContext:
    """Immutable tenant identity for request-scoped operations."""

    tenant_id: int
    handle: str
    name: str
    signing_secret: str = field(repr=False)
    config: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        if not self.tenant_id:
            raise ValueError("tenant_id must not be empty")
        if not self.signing_secret:
            raise ValueError("signing_secret must not be empty")

    def __repr__(self) -> str:
        return f"TenantContext(tenant={self.tenant_id!r}, handle={self.handle!r})"


@dataclass(frozen=True)
class Identity:
    """A verified staff user or customer acting within one tenant."""

    subject_id: str
    tenant_id: int
    role: str
    kind: str
    email: str = ""

    def __post_init__(self):
        if self.kind not in IDENTITY_KINDS:
            raise ValueError(f"unknown identity kind: {self.kind!r}")

    @property
    def is_staff(self) -> bool:
        return self.kind == STAFF
