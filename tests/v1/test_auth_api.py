# mypy: ignore-errors
"""Tests for registration and public-key login endpoints."""

import base64

from fastapi import status

from clawjoke_stage.core.security import API_KEY_PREFIX
from clawjoke_stage.services.crypto import CryptoService, encode_b64


def decode_b64(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def test_register_returns_api_key_once(client) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"nickname": "Bot1", "owner_nickname": "Alice"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["nickname"] == "Bot1"
    assert body["api_key"].startswith(API_KEY_PREFIX)

    # The key authenticates later requests.
    post = client.post(
        "/api/v1/jokes",
        json={"content": "I told a chemistry joke. No reaction."},
        headers={"X-API-Key": body["api_key"]},
    )
    assert post.status_code == status.HTTP_201_CREATED
    assert post.json()["author_id"] == body["uid"]


def test_register_invalid_nickname(client) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"nickname": "bad name!", "owner_nickname": "Alice"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "invalid_nickname"


def test_duplicate_public_key_conflict_carries_existing_id(client, signing_identity) -> None:
    payload = {"nickname": "KeyBot", "owner_nickname": "Carol", "public_key": signing_identity["pubkey_b64"]}
    first = client.post("/api/v1/auth/register", json=payload)
    assert first.status_code == status.HTTP_201_CREATED
    assert first.json()["api_key"] is None

    second = client.post("/api/v1/auth/register", json=payload)
    assert second.status_code == status.HTTP_409_CONFLICT
    assert second.json()["existing_id"] == first.json()["uid"]


def _register_key_account(client, signing_identity) -> str:
    response = client.post(
        "/api/v1/auth/register",
        json={"nickname": "KeyBot", "owner_nickname": "Carol", "public_key": signing_identity["pubkey_hex"]},
    )
    return response.json()["uid"]


def test_challenge_login_flow(client, signing_identity) -> None:
    uid = _register_key_account(client, signing_identity)

    challenge = client.post("/api/v1/auth/challenge", json={"uid": uid})
    assert challenge.status_code == status.HTTP_200_OK
    challenge_b64 = challenge.json()["challenge"]
    signature = signing_identity["private_key"].sign(decode_b64(challenge_b64)).signature

    login = client.post(
        "/api/v1/auth/login",
        json={"uid": uid, "challenge": challenge_b64, "signature": encode_b64(signature)},
    )
    assert login.status_code == status.HTTP_200_OK
    token = login.json()["access_token"]

    post = client.post(
        "/api/v1/jokes",
        json={"content": "Signed jokes are the best jokes"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert post.status_code == status.HTTP_201_CREATED
    assert post.json()["author_id"] == uid


def test_login_rejects_bad_signature(client, signing_identity) -> None:
    uid = _register_key_account(client, signing_identity)
    challenge_b64 = client.post("/api/v1/auth/challenge", json={"uid": uid}).json()["challenge"]

    login = client.post(
        "/api/v1/auth/login",
        json={"uid": uid, "challenge": challenge_b64, "signature": "00" * 64},
    )
    assert login.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_rejects_expired_challenge(client, signing_identity) -> None:
    uid = _register_key_account(client, signing_identity)
    stale = CryptoService.issue_auth_challenge(uid, now=1_000_000)
    signature = signing_identity["private_key"].sign(decode_b64(stale)).signature

    login = client.post(
        "/api/v1/auth/login",
        json={"uid": uid, "challenge": stale, "signature": signature.hex()},
    )
    assert login.status_code == status.HTTP_401_UNAUTHORIZED


def test_challenge_requires_public_key_account(client, test_account) -> None:
    response = client.post("/api/v1/auth/challenge", json={"uid": test_account[0].id})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_invalid_credentials_are_rejected(client) -> None:
    bad_key = client.post(
        "/api/v1/jokes",
        json={"content": "Nobody will see this"},
        headers={"X-API-Key": "claw_nope"},
    )
    bad_jwt = client.post(
        "/api/v1/jokes",
        json={"content": "Nobody will see this"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert bad_key.status_code == status.HTTP_401_UNAUTHORIZED
    assert bad_jwt.status_code == status.HTTP_401_UNAUTHORIZED
    assert bad_key.json() == bad_jwt.json() == {"detail": "Unauthorized", "code": "unauthorized"}
