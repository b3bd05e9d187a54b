# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.
"""Unit tests for the tenant-scoped staff, customer and site repositories."""

import pytest

from storeplex.storage.database import get_session_factory
from storeplex.storage.repositories import (
    DEFAULT_THEME,
    CustomerRepository,
    SiteConfigRepository,
    StaffUserRepository,
)


@pytest.fixture
async def two_tenants(make_tenant):
    await make_tenant(tenant_id=1001, handle="acme")
    await make_tenant(tenant_id=1002, handle="globex", signing_secret="globex-signing-secret-0123456789abcdef")


class TestStaffUserRepository:
    @pytest.mark.asyncio
    async def test_count_active_admins(self, two_tenants, make_staff, db_session):
        await make_staff(1001, "owner@acme.test")
        await make_staff(1001, "backup@acme.test", is_active=False)
        await make_staff(1001, "stock@acme.test", role="stockagent")
        await make_staff(1002, "owner@globex.test")

        repo = StaffUserRepository(db_session)
        assert await repo.count_active_admins(1001) == 1
        assert await repo.count_active_admins(1002) == 1

    @pytest.mark.asyncio
    async def test_count_without_admins(self, two_tenants, db_session):
        assert await StaffUserRepository(db_session).count_active_admins(1001) == 0


class TestCustomerRepository:
    @pytest.mark.asyncio
    async def test_set_active(self, two_tenants, make_customer, db_session):
        customer = await make_customer(1001, "shopper@acme.test")
        updated = await CustomerRepository(db_session).set_active(1001, str(customer.id).upper(), False)
        await db_session.commit()
        assert updated.is_active is False

        async with get_session_factory()() as fresh:
            stored = await CustomerRepository(fresh).get(1001, customer.id)
            assert stored.is_active is False

    @pytest.mark.asyncio
    async def test_set_active_is_tenant_scoped(self, two_tenants, make_customer, db_session):
        customer = await make_customer(1001, "shopper@acme.test")
        assert await CustomerRepository(db_session).set_active(1002, customer.id, False) is None
        assert await CustomerRepository(db_session).set_active(1001, "not-a-uuid", False) is None

    @pytest.mark.asyncio
    async def test_list_by_tenant(self, two_tenants, make_customer, db_session):
        await make_customer(1001, "a@acme.test")
        await make_customer(1001, "b@acme.test")
        await make_customer(1002, "c@globex.test")
        customers = await CustomerRepository(db_session).list_by_tenant(1001)
        assert {c.email for c in customers} == {"a@acme.test", "b@acme.test"}


class TestSiteConfigRepository:
    @pytest.mark.asyncio
    async def test_missing_config(self, two_tenants, db_session):
        assert await SiteConfigRepository(db_session).get(1001) is None

    @pytest.mark.asyncio
    async def test_first_write_starts_from_defaults(self, two_tenants, db_session):
        site = await SiteConfigRepository(db_session).upsert(1001, site_name="Acme")
        await db_session.commit()
        assert site.site_name == "Acme"
        assert site.theme == DEFAULT_THEME
        assert site.delivery_fees == []

    @pytest.mark.asyncio
    async def test_theme_merges(self, two_tenants, db_session):
        repo = SiteConfigRepository(db_session)
        await repo.upsert(1001, theme={"primary_color": "#000000"})
        await db_session.commit()

        async with get_session_factory()() as fresh:
            site = await SiteConfigRepository(fresh).upsert(1001, slogan="Hello")
            await fresh.commit()
            assert site.theme["primary_color"] == "#000000"
            assert site.theme["footer_link_color"] == DEFAULT_THEME["footer_link_color"]
            assert site.slogan == "Hello"

    @pytest.mark.asyncio
    async def test_configs_are_per_tenant(self, two_tenants, db_session):
        repo = SiteConfigRepository(db_session)
        await repo.upsert(1001, site_name="Acme", social_links=[{"platform": "x", "url": "https://x.com/acme"}])
        await db_session.commit()
        assert await repo.get(1002) is None
