# src/clawjoke_stage/services/crypto.py
"""Ed25519 key handling and signed login challenges.

A login challenge is ``nonce || issued_at || tag`` where the tag is a keyed
BLAKE3 MAC binding the nonce and issue time to one account. The server keeps
no challenge state; it re-derives the tag when the signed challenge returns.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import secrets
import struct
import time

from blake3 import blake3
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from clawjoke_stage.core.settings import settings
from clawjoke_stage.utils.hash import blake3_digest

PUBKEY_LENGTH_BYTES = 32
SIGNATURE_LENGTH_BYTES = 64

_ISSUED_AT = struct.Struct(">Q")
_NONCE_BYTES = 16
_TAG_BYTES = 32
CHALLENGE_PAYLOAD_BYTES = _NONCE_BYTES + _ISSUED_AT.size + _TAG_BYTES


def encode_b64(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def decode_b64(data: str) -> bytes:
    """Decode URL-safe base64, tolerating missing padding."""
    try:
        return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
    except (binascii.Error, ValueError) as err:
        raise ValueError("Invalid base64 encoding") from err


def _challenge_tag(account_id: str, nonce: bytes, issued_at: bytes) -> bytes:
    key = blake3_digest(settings.secret_key.encode("utf-8"))
    mac = blake3(b"clawjoke:login-challenge:", key=key)
    mac.update(account_id.encode("utf-8"))
    mac.update(b"\x00")
    mac.update(nonce)
    mac.update(issued_at)
    return mac.digest(length=_TAG_BYTES)


class CryptoService:
    """Public key parsing, signature checks and login challenges."""

    @staticmethod
    def decode_flexible(data: str) -> bytes:
        """Decode a hex or URL-safe base64 string, trying hex first."""
        cleaned = data.strip()
        try:
            return bytes.fromhex(cleaned)
        except ValueError:
            return decode_b64(cleaned)

    @staticmethod
    def validate_and_decode_pubkey(pubkey_encoded: str) -> bytes:
        """Return the raw 32-byte Ed25519 key from its base64 or hex form.

        Raises:
            ValueError: If neither encoding yields a key of the right size
        """
        cleaned = pubkey_encoded.strip()
        candidates = []
        for decode in (decode_b64, bytes.fromhex):
            try:
                candidates.append(decode(cleaned))
            except ValueError:
                continue
        for raw in candidates:
            if len(raw) == PUBKEY_LENGTH_BYTES:
                return raw
        raise ValueError("Public key must be a base64 or hex encoded 32-byte Ed25519 key")

    @staticmethod
    def verify_signature_bytes(pubkey_bytes: bytes, message: bytes, signature: bytes) -> bool:
        if len(signature) != SIGNATURE_LENGTH_BYTES:
            return False
        try:
            Ed25519PublicKey.from_public_bytes(pubkey_bytes).verify(signature, message)
        except (InvalidSignature, ValueError):
            return False
        return True

    @staticmethod
    def issue_auth_challenge(account_id: str, *, now: float | None = None) -> str:
        """Return a fresh base64 challenge for ``account_id`` to sign.

        ``now`` overrides the issue time (seconds since the epoch).
        """
        if not account_id:
            raise ValueError("Challenge account must be provided")
        nonce = secrets.token_bytes(_NONCE_BYTES)
        issued_at = _ISSUED_AT.pack(int(time.time() if now is None else now))
        return encode_b64(nonce + issued_at + _challenge_tag(account_id, nonce, issued_at))

    @staticmethod
    def validate_auth_challenge(
        account_id: str,
        challenge_b64: str,
        *,
        now: float | None = None,
    ) -> bytes:
        """Check that a challenge was issued to ``account_id`` and is still fresh.

        Returns:
            The raw challenge bytes, which is the message the client signs

        Raises:
            ValueError: If the challenge is malformed, forged or expired
        """
        raw = decode_b64(challenge_b64)
        if len(raw) != CHALLENGE_PAYLOAD_BYTES:
            raise ValueError("Invalid challenge payload size")

        nonce = raw[:_NONCE_BYTES]
        issued_at = raw[_NONCE_BYTES:_NONCE_BYTES + _ISSUED_AT.size]
        tag = raw[_NONCE_BYTES + _ISSUED_AT.size:]
        if not hmac.compare_digest(tag, _challenge_tag(account_id, nonce, issued_at)):
            raise ValueError("Challenge signature mismatch")

        (issued,) = _ISSUED_AT.unpack(issued_at)
        age = (time.time() if now is None else now) - issued
        if age < 0 or age > settings.auth_challenge_ttl_seconds:
            raise ValueError("Challenge has expired")
        return raw
