# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Password Hashing — bcrypt with per-hash salt.

bcrypt is CPU-bound, so the async helpers push it onto a worker thread to
keep the event loop responsive.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import bcrypt

from storeplex.core.config import settings

logger = logging.getLogger("storeplex.auth.passwords")

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
_MAX_BYTES = 72

_dummy_hash: Optional[bytes] = None


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        logger.warning("Unreadable password hash encountered")
        return False


def _get_dummy_hash() -> bytes:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hashpw(b"storeplex-dummy", bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return _dummy_hash


def burn_password_check(password: str) -> None:
    """Spend the same work as a real check, for identities that do not exist."""
    bcrypt.checkpw(_encode(password), _get_dummy_hash())


async def hash_password_async(password: str) -> str:
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, password_hash: Optional[str]) -> bool:
    """Check a password; a missing hash still costs one bcrypt round-trip."""
    if password_hash is None:
        await asyncio.to_thread(burn_password_check, password)
        return False
    return await asyncio.to_thread(verify_password, password, password_hash)
