"""Credential generation and password hashing helpers."""

from __future__ import annotations

import secrets

import argon2

API_KEY_PREFIX = "claw_"
ADMIN_TOKEN_PREFIX = "admin_"

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


def generate_api_key() -> str:
    """Return a fresh shared-secret API key for a registered account."""
    return API_KEY_PREFIX + secrets.token_hex(24)


def generate_admin_token() -> str:
    """Return an opaque bearer token for an admin session."""
    return ADMIN_TOKEN_PREFIX + secrets.token_hex(24)


def hash_password(password: str) -> str:
    """Hash a password using argon2id (salt is embedded in the result)."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its argon2id hash. Never raises on mismatch."""
    try:
        return _hasher.verify(password_hash, password)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False
