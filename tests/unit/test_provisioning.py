# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.
"""Unit tests for ProvisioningOrchestrator."""

import pytest
from sqlalchemy import func, select

from storeplex.auth.issuer import CredentialIssuer
from storeplex.auth.verifier import CredentialVerifier
from storeplex.core.config import settings
from storeplex.core.errors import (
    DuplicateTenant,
    InvalidToken,
    SequenceUnavailable,
    ServerError,
    TenantInactive,
    TenantNotFound,
    ValidationFailed,
)
from storeplex.core.metrics import platform_metrics
from storeplex.storage.database import get_session_factory
from storeplex.storage.models import StaffUser, Tenant
from storeplex.storage.repositories import StaffUserRepository, TenantRepository
from storeplex.tenancy.provisioning import ProvisioningOrchestrator, normalize_handle
from storeplex.tenancy.resolver import TenantResolver, to_context


async def _count(model):
    async with get_session_factory()() as db:
        return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _provision_acme(orchestrator, **overrides):
    kwargs = dict(
        client_name="Acme Store",
        handle="acme",
        admin_email="Admin@Acme.test",
        admin_password="correct-horse",
    )
    kwargs.update(overrides)
    return await orchestrator.provision(**kwargs)


class TestProvision:
    @pytest.mark.asyncio
    async def test_success(self, orchestrator):
        result = await _provision_acme(orchestrator, extra_config={"cloudinary": {"cloud_name": "acme"}})

        assert result.tenant_id == 1001
        assert result.handle == "acme"
        assert result.name == "Acme Store"
        assert result.admin_email == "admin@acme.test"

        tenant = await orchestrator.lookup_tenant("acme")
        assert tenant.is_active
        assert len(tenant.signing_secret) == 64
        assert tenant.config["cloudinary"]["cloud_name"] == "acme"

        async with get_session_factory()() as db:
            admin = await StaffUserRepository(db).get(1001, result.admin_id)
        assert admin.role == "admin"
        assert admin.password_hash != "correct-horse"
        assert platform_metrics.get_counter("provisioning", label="ok") == 1

    @pytest.mark.asyncio
    async def test_ids_are_sequential(self, orchestrator):
        first = await _provision_acme(orchestrator)
        second = await _provision_acme(orchestrator, client_name="Globex", handle="globex")
        assert (first.tenant_id, second.tenant_id) == (1001, 1002)

    @pytest.mark.asyncio
    async def test_secrets_are_unique(self, orchestrator):
        await _provision_acme(orchestrator)
        await _provision_acme(orchestrator, client_name="Globex", handle="globex")
        a = await orchestrator.lookup_tenant("acme")
        b = await orchestrator.lookup_tenant("globex")
        assert a.signing_secret != b.signing_secret

    @pytest.mark.asyncio
    async def test_admin_can_login(self, orchestrator, db_session):
        await _provision_acme(orchestrator)
        ctx = to_context(await orchestrator.lookup_tenant("acme"))
        issued = await CredentialIssuer(db_session).issue_staff_token(ctx, "admin@acme.test", "correct-horse")
        assert issued.role == "admin"

    @pytest.mark.asyncio
    async def test_duplicate_handle(self, orchestrator):
        await _provision_acme(orchestrator)
        with pytest.raises(DuplicateTenant):
            await _provision_acme(orchestrator, client_name="Another Acme")
        assert await _count(Tenant) == 1
        assert await _count(StaffUser) == 1

    @pytest.mark.asyncio
    async def test_duplicate_name(self, orchestrator):
        await _provision_acme(orchestrator)
        with pytest.raises(DuplicateTenant):
            await _provision_acme(orchestrator, handle="acme-two")
        assert await _count(Tenant) == 1

    @pytest.mark.asyncio
    async def test_race_settled_by_unique_constraint(self, orchestrator, monkeypatch):
        await _provision_acme(orchestrator)

        async def _miss(self, value):
            return None

        # simulate a concurrent request that passed the pre-check
        with monkeypatch.context() as m:
            m.setattr(TenantRepository, "get_by_handle", _miss)
            m.setattr(TenantRepository, "get_by_name", _miss)
            with pytest.raises(DuplicateTenant):
                await _provision_acme(orchestrator)

        assert await _count(Tenant) == 1
        assert platform_metrics.get_counter("provisioning", label="conflict") == 1

    @pytest.mark.asyncio
    async def test_admin_failure_rolls_back_tenant(self, orchestrator, monkeypatch):
        async def _boom(self, **kwargs):
            raise RuntimeError("disk full")

        with monkeypatch.context() as m:
            m.setattr(StaffUserRepository, "create", _boom)
            with pytest.raises(ServerError):
                await _provision_acme(orchestrator)

        assert await orchestrator.lookup_tenant("acme") is None
        assert await _count(Tenant) == 0
        assert platform_metrics.get_counter("provisioning", label="failed") == 1

    @pytest.mark.asyncio
    async def test_sequence_gap_after_rollback(self, orchestrator, monkeypatch):
        async def _boom(self, **kwargs):
            raise RuntimeError("disk full")

        with monkeypatch.context() as m:
            m.setattr(StaffUserRepository, "create", _boom)
            with pytest.raises(ServerError):
                await _provision_acme(orchestrator)

        result = await _provision_acme(orchestrator)
        assert result.tenant_id == 1002

    @pytest.mark.asyncio
    async def test_sequence_unavailable(self, db_engine):
        class _DownSequences:
            async def next(self, name):
                raise SequenceUnavailable()

        orchestrator = ProvisioningOrchestrator(get_session_factory(), _DownSequences())
        with pytest.raises(SequenceUnavailable):
            await _provision_acme(orchestrator)
        assert await _count(Tenant) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("handle", ["", "Bad Handle", "-acme", "acme_store", "a" * 64, "1001", "42"])
    async def test_invalid_handle(self, orchestrator, handle):
        with pytest.raises(ValidationFailed):
            await _provision_acme(orchestrator, handle=handle)

    @pytest.mark.asyncio
    async def test_handle_with_digits_and_letters(self, orchestrator):
        result = await _provision_acme(orchestrator, handle="7eleven")
        assert result.handle == "7eleven"

    @pytest.mark.asyncio
    async def test_numeric_handle_leaves_nothing_behind(self, orchestrator):
        with pytest.raises(ValidationFailed) as exc_info:
            await _provision_acme(orchestrator, handle="1001")
        assert exc_info.value.details == {"field": "handle"}
        assert await _count(Tenant) == 0

    @pytest.mark.asyncio
    async def test_short_admin_password(self, orchestrator, monkeypatch):
        monkeypatch.setattr(settings, "MIN_PASSWORD_LENGTH", 12)
        with pytest.raises(ValidationFailed) as exc_info:
            await _provision_acme(orchestrator, admin_password="eleven-char")
        assert exc_info.value.details == {"field": "admin_password"}
        assert await _count(Tenant) == 0

    @pytest.mark.asyncio
    async def test_blank_client_name(self, orchestrator):
        with pytest.raises(ValidationFailed):
            await _provision_acme(orchestrator, client_name="   ")

    def test_normalize_handle(self):
        assert normalize_handle("  Acme-Store ") == "acme-store"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_deactivate_locks_out_tenant(self, orchestrator, db_session):
        await _provision_acme(orchestrator)
        tenant = await orchestrator.set_active("acme", False)
        assert tenant.is_active is False

        with pytest.raises(TenantInactive):
            await TenantResolver(TenantRepository(db_session)).resolve("acme")

        await orchestrator.set_active("1001", True)
        async with get_session_factory()() as db:
            ctx = await TenantResolver(TenantRepository(db)).resolve("acme")
        assert ctx.tenant_id == 1001

    @pytest.mark.asyncio
    async def test_rotate_secret_revokes_tokens(self, orchestrator, db_session):
        await _provision_acme(orchestrator)
        old_ctx = to_context(await orchestrator.lookup_tenant("acme"))
        issued = await CredentialIssuer(db_session).issue_staff_token(old_ctx, "admin@acme.test", "correct-horse")

        await orchestrator.rotate_signing_secret("acme")
        new_ctx = to_context(await orchestrator.lookup_tenant("acme"))
        assert new_ctx.signing_secret != old_ctx.signing_secret

        with pytest.raises(InvalidToken):
            await CredentialVerifier(db_session).verify(new_ctx, issued.token, "staff")

    @pytest.mark.asyncio
    async def test_update_config(self, orchestrator):
        await _provision_acme(orchestrator)
        await orchestrator.update_config("acme", {"cloudinary": {"cloud_name": "new"}})
        tenant = await orchestrator.lookup_tenant("acme")
        assert tenant.config == {"cloudinary": {"cloud_name": "new"}}

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, orchestrator):
        with pytest.raises(TenantNotFound):
            await orchestrator.set_active("nobody", False)
        with pytest.raises(TenantNotFound):
            await orchestrator.rotate_signing_secret("nobody")
