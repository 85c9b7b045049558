# src/clawjoke_stage/utils/hash.py
"""BLAKE3 hashing helpers for credential digests and voter fingerprints."""

from __future__ import annotations

from blake3 import blake3

# Domain separation prefixes.
CREDENTIAL_CONTEXT = b"clawjoke:credential:"
FINGERPRINT_CONTEXT = b"clawjoke:fingerprint:"


def blake3_digest(data: bytes) -> bytes:
    """Return the byte digest of the supplied data."""
    return blake3(data).digest()


def blake3_hexdigest(data: bytes) -> str:
    """Return the hexadecimal digest of the supplied data."""
    return blake3(data).hexdigest()


def credential_digest(kind: str, material: bytes | str) -> str:
    """Return the lookup digest for a credential of the given kind.

    Only this digest is persisted for shared-secret credentials.
    """
    raw = material.encode("utf-8") if isinstance(material, str) else material
    return blake3_hexdigest(CREDENTIAL_CONTEXT + kind.encode("ascii") + b":" + raw)


def fingerprint(origin: str, secret: str) -> str:
    """Return a keyed fingerprint of a network origin such as a client IP."""
    key = blake3_digest(secret.encode("utf-8"))
    return blake3(FINGERPRINT_CONTEXT + origin.encode("utf-8"), key=key).hexdigest()
