# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""Unit tests for API dependencies (bearer parsing + super-admin key)."""

import pytest

from storeplex.api.deps import bearer_token, require_super_admin
from storeplex.core.errors import Forbidden, ServerMisconfigured


class TestBearerToken:
    def test_parses_bearer(self):
        assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert bearer_token("bearer abc") == "abc"

    @pytest.mark.parametrize("value", [None, "", "Bearer", "Bearer   ", "Basic abc", "abc"])
    def test_rejects_other_values(self, value):
        assert bearer_token(value) is None


class TestRequireSuperAdmin:
    @pytest.mark.asyncio
    async def test_correct_key(self, test_settings):
        await require_super_admin(x_api_key=test_settings.SUPER_ADMIN_API_KEY)

    @pytest.mark.asyncio
    async def test_wrong_key(self):
        with pytest.raises(Forbidden):
            await require_super_admin(x_api_key="guess")

    @pytest.mark.asyncio
    async def test_missing_key(self):
        with pytest.raises(Forbidden):
            await require_super_admin(x_api_key=None)

    @pytest.mark.asyncio
    async def test_unconfigured_key(self, test_settings, monkeypatch):
        monkeypatch.setattr(test_settings, "SUPER_ADMIN_API_KEY", "")
        with pytest.raises(ServerMisconfigured):
            await require_super_admin(x_api_key="anything")
