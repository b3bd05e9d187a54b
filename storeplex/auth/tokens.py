# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Bearer Tokens — HS256 JWTs signed with the tenant's signing secret.

Claims:
  sub   subject id (staff user or customer UUID)
  tid   tenant id the token was minted for
  role  staff role, or "customer"
  kind  identity class marker: "staff" | "customer"
  iat / exp

Tokens are never stored. Rotating a tenant's signing secret invalidates
every token minted under the previous one.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from pydantic import BaseModel, Field, ValidationError

from storeplex.core.config import settings
from storeplex.core.errors import InvalidToken, TokenExpired
from storeplex.core.tenant import CUSTOMER, STAFF

_REQUIRED_CLAIMS = ["sub", "tid", "role", "kind", "exp", "iat"]


class TokenClaims(BaseModel):
    sub: str
    tid: int
    role: str
    kind: str = Field(pattern=f"^({STAFF}|{CUSTOMER})$")
    iat: int
    exp: int


def token_ttl(kind: str) -> timedelta:
    seconds = settings.STAFF_TOKEN_TTL if kind == STAFF else settings.CUSTOMER_TOKEN_TTL
    return timedelta(seconds=seconds)


def encode_token(
    secret: str,
    subject_id: str,
    tenant_id: int,
    role: str,
    kind: str,
    ttl: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> tuple[str, datetime]:
    """Sign a token; returns (token, expires_at)."""
    issued = now or datetime.now(timezone.utc)
    expires = issued + (ttl if ttl is not None else token_ttl(kind))
    payload: Dict[str, Any] = {
        "sub": str(subject_id),
        "tid": tenant_id,
        "role": role,
        "kind": kind,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    token = jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)
    return token, expires


def decode_token(token: str, secret: str) -> TokenClaims:
    """
    Verify signature and expiry, then validate the claim shape.

    Raises TokenExpired or InvalidToken.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError as e:
        raise InvalidToken(details={"reason": type(e).__name__})

    try:
        return TokenClaims(**payload)
    except ValidationError:
        raise InvalidToken(details={"reason": "MalformedClaims"})
