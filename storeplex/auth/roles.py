# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Role Gate — Accept or reject an already-verified identity by role.
"""

from __future__ import annotations

from typing import Iterable

from storeplex.core.config import settings
from storeplex.core.errors import Forbidden, InvalidRole
from storeplex.core.tenant import Identity

ADMIN = "admin"
CUSTOMER_ROLE = "customer"


def authorize(identity: Identity, required_roles: Iterable[str]) -> None:
    """Raise Forbidden unless identity.role is one of required_roles. No I/O."""
    allowed = frozenset(required_roles)
    if identity.role not in allowed:
        raise Forbidden(details={"required": sorted(allowed), "role": identity.role})


def validate_staff_role(role: str) -> str:
    if role not in settings.STAFF_ROLES:
        raise InvalidRole(details={"role": role, "allowed": list(settings.STAFF_ROLES)})
    return role
