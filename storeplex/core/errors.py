# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Error Taxonomy — Every failure a caller can observe.

Each error carries a stable ``code`` and an HTTP ``status_code``. The API
layer renders them uniformly (see ``storeplex.api.errors``); services raise
them directly and never return sentinel values for failures.

Categories:
  - client input      400 / 422
  - authorization     401 / 403
  - conflict          409
  - configuration     500 (distinct codes, logged loudly)
  - transient storage 503 / 500
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class StoreplexError(Exception):
    """Base error with structured response fields."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# ── Client input ────────────────────────────────────────────

class MissingTenantIdentifier(StoreplexError):
    code = "MISSING_TENANT_IDENTIFIER"
    status_code = 400
    default_message = "Tenant identifier is missing (header or subdomain)"


class ValidationFailed(StoreplexError):
    code = "VALIDATION_ERROR"
    status_code = 422
    default_message = "Request validation failed"


class InvalidRole(StoreplexError):
    code = "INVALID_ROLE"
    status_code = 422
    default_message = "Unknown staff role"


# ── Tenant resolution ───────────────────────────────────────

class TenantNotFound(StoreplexError):
    code = "TENANT_NOT_FOUND"
    status_code = 404
    default_message = "Client not found"


class AccountNotFound(StoreplexError):
    code = "ACCOUNT_NOT_FOUND"
    status_code = 404
    default_message = "Account not found for this client"


class TenantInactive(StoreplexError):
    code = "TENANT_INACTIVE"
    status_code = 403
    default_message = "This client account is inactive"


# ── Authentication / authorization ──────────────────────────

class InvalidCredentials(StoreplexError):
    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Invalid credentials"


class AccountInactive(StoreplexError):
    code = "ACCOUNT_INACTIVE"
    status_code = 403
    default_message = "This account is disabled"


class MissingToken(StoreplexError):
    code = "MISSING_TOKEN"
    status_code = 401
    default_message = "Not authorized, no token provided"


class InvalidToken(StoreplexError):
    code = "INVALID_TOKEN"
    status_code = 401
    default_message = "Not authorized, token failed"


class TokenExpired(StoreplexError):
    code = "TOKEN_EXPIRED"
    status_code = 401
    default_message = "Authentication token has expired"


class IdentityMismatch(StoreplexError):
    code = "IDENTITY_MISMATCH"
    status_code = 403
    default_message = "Token is not valid for this kind of account"


class IdentityNotFound(StoreplexError):
    code = "IDENTITY_NOT_FOUND"
    status_code = 401
    default_message = "Not authorized, account not found for this client"


class Forbidden(StoreplexError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "You do not have permission to perform this action"


# ── Conflicts ───────────────────────────────────────────────

class DuplicateTenant(StoreplexError):
    code = "DUPLICATE_TENANT"
    status_code = 409
    default_message = "A client with this name or handle already exists"


class DuplicateAccount(StoreplexError):
    code = "DUPLICATE_ACCOUNT"
    status_code = 409
    default_message = "An account with this email already exists for this client"


# ── Configuration faults ────────────────────────────────────

class TenantMisconfigured(StoreplexError):
    code = "TENANT_MISCONFIGURED"
    status_code = 500
    default_message = "Client configuration is incomplete"


class ServerMisconfigured(StoreplexError):
    code = "SERVER_MISCONFIGURED"
    status_code = 500
    default_message = "Server configuration error"


# ── Storage faults ──────────────────────────────────────────

class SequenceUnavailable(StoreplexError):
    code = "SEQUENCE_UNAVAILABLE"
    status_code = 503
    default_message = "Sequence store is unavailable, retry later"


class ServerError(StoreplexError):
    code = "SERVER_ERROR"
    status_code = 500
    default_message = "Server error"
