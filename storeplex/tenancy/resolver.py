# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Tenant Resolver — Determine the target tenant of an inbound request.

Precedence:
  1. Tenant header (``X-Tenant-Id`` by default). Numeric values match the
     tenant id, anything else matches the handle.
  2. Only when the header is absent: the request subdomain, matched
     against the handle.

A header that names an unknown tenant is not retried against the
subdomain.
"""

from __future__ import annotations

import logging
from typing import Optional

from storeplex.core.config import settings
from storeplex.core.errors import (
    MissingTenantIdentifier,
    TenantInactive,
    TenantMisconfigured,
    TenantNotFound,
)
from storeplex.core.tenant import TenantContext
from storeplex.storage.models import Tenant
from storeplex.storage.repositories import TenantRepository

logger = logging.getLogger("storeplex.tenancy.resolver")

_IGNORED_SUBDOMAINS = {"www"}


def subdomain_from_host(host: Optional[str], base_domain: str = "") -> Optional[str]:
    """
    Extract the tenant subdomain from a Host header value.

    Examples:
        subdomain_from_host("acme.shops.example.com", "shops.example.com") -> "acme"
        subdomain_from_host("acme.example.com") -> "acme"
        subdomain_from_host("example.com") -> None
        subdomain_from_host("localhost:8000") -> None
    """
    if not host:
        return None
    hostname = host.strip().lower().split(":", 1)[0].rstrip(".")
    if not hostname or hostname.replace(".", "").isdigit():
        return None

    if base_domain:
        base = base_domain.strip().lower().strip(".")
        suffix = "." + base
        if not hostname.endswith(suffix):
            return None
        candidate = hostname[: -len(suffix)].split(".")[-1]
    else:
        labels = hostname.split(".")
        if len(labels) < 3:
            return None
        candidate = labels[0]

    if not candidate or candidate in _IGNORED_SUBDOMAINS:
        return None
    return candidate


def to_context(tenant: Tenant) -> TenantContext:
    return TenantContext(
        tenant_id=tenant.tenant_id,
        handle=tenant.handle,
        name=tenant.name,
        signing_secret=tenant.signing_secret,
        config=dict(tenant.config or {}),
    )


class TenantResolver:
    def __init__(self, tenants: TenantRepository, base_domain: Optional[str] = None) -> None:
        self._tenants = tenants
        self._base_domain = settings.BASE_DOMAIN if base_domain is None else base_domain

    async def resolve(
        self,
        header_value: Optional[str],
        host: Optional[str] = None,
    ) -> TenantContext:
        identifier = (header_value or "").strip()
        source = "header"
        if not identifier:
            identifier = subdomain_from_host(host, self._base_domain) or ""
            source = "subdomain"
        if not identifier:
            raise MissingTenantIdentifier()

        tenant = await self._tenants.lookup(identifier)
        if tenant is None:
            logger.info("No client for %s %r", source, identifier)
            raise TenantNotFound(details={"identifier": identifier})

        if not tenant.is_active:
            raise TenantInactive(details={"tenant_id": tenant.tenant_id})

        if not tenant.signing_secret:
            logger.error(
                "Client %s has no signing secret; rejecting request before authentication",
                tenant.handle,
                extra={"tenant_id": tenant.tenant_id},
            )
            raise TenantMisconfigured(details={"tenant_id": tenant.tenant_id})

        return to_context(tenant)
