# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.
"""Unit tests for StoreplexSettings configuration."""

import pytest
from pydantic import ValidationError

from storeplex.core.config import StoreplexSettings


class TestStoreplexSettings:
    def test_defaults(self):
        s = StoreplexSettings(_env_file=None)
        assert s.REDIS_URL == "redis://localhost:6379/0"
        assert "postgresql+asyncpg" in s.DATABASE_URL
        assert s.TENANT_HEADER == "X-Tenant-Id"
        assert s.SEQUENCE_BASELINE == 1000
        assert s.STAFF_TOKEN_TTL == 30 * 24 * 3600
        assert s.CUSTOMER_TOKEN_TTL == 7 * 24 * 3600
        assert s.STAFF_ROLES == ["admin", "confirmation", "stockagent"]
        assert s.SUPER_ADMIN_API_KEY == ""
        assert s.STOREPLEX_ENV == "dev"
        assert s.MIN_PASSWORD_LENGTH == 8

    def test_custom_values(self):
        s = StoreplexSettings(
            _env_file=None,
            REDIS_URL="redis://custom:6380/1",
            BASE_DOMAIN="shops.example.com",
            SEQUENCE_BASELINE=5000,
            STAFF_ROLES=["admin", "packer"],
        )
        assert s.REDIS_URL == "redis://custom:6380/1"
        assert s.BASE_DOMAIN == "shops.example.com"
        assert s.SEQUENCE_BASELINE == 5000
        assert "packer" in s.STAFF_ROLES

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(ValidationError):
            StoreplexSettings(_env_file=None, BCRYPT_ROUNDS=3)
        assert StoreplexSettings(_env_file=None, BCRYPT_ROUNDS=4).BCRYPT_ROUNDS == 4

    def test_password_length_is_shared(self):
        from storeplex.api.auth import CustomerRegisterRequest
        from storeplex.api.provisioning import ProvisionRequest
        from storeplex.api.staff import StaffCreateRequest

        def min_length(model, field):
            return next(m.min_length for m in model.model_fields[field].metadata if hasattr(m, "min_length"))

        expected = StoreplexSettings(_env_file=None).MIN_PASSWORD_LENGTH
        assert min_length(CustomerRegisterRequest, "password") == expected
        assert min_length(StaffCreateRequest, "password") == expected
        assert min_length(ProvisionRequest, "admin_password") == expected
