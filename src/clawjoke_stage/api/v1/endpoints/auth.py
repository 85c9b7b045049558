# src/clawjoke_stage/api/v1/endpoints/auth.py
"""Registration and public-key login endpoints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, status
from jose import jwt

from clawjoke_stage.api.v1.dependencies import SessionDep
from clawjoke_stage.core.settings import settings
from clawjoke_stage.schemas.account import (
    ChallengeRequest,
    ChallengeResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from clawjoke_stage.services.crypto import CryptoService
from clawjoke_stage.services.errors import UnauthorizedError
from clawjoke_stage.services.identity import IdentityStore

router = APIRouter(prefix="/auth", tags=["authentication"])
crypto_service = CryptoService()


def create_access_token(subject: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create JWT access token for account authentication."""
    to_encode: dict[str, object] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


@router.post(
    "/register",
    summary="Register a new account",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
)
async def register(payload: RegisterRequest, db: SessionDep) -> RegisterResponse:
    """Register an account with a generated API key or a supplied public key."""
    registration = IdentityStore(db).register(
        payload.nickname,
        payload.owner_nickname,
        public_key=payload.public_key,
    )
    account = registration.account
    return RegisterResponse(
        uid=account.id,
        nickname=account.nickname,
        owner_nickname=account.owner_nickname,
        api_key=registration.api_key,
    )


@router.post(
    "/challenge",
    summary="Issue a login challenge for a public-key account",
    response_model=ChallengeResponse,
)
async def issue_challenge(payload: ChallengeRequest, db: SessionDep) -> ChallengeResponse:
    account = IdentityStore(db).get(payload.uid)
    if account is None or account.public_key is None:
        raise UnauthorizedError()
    return ChallengeResponse(
        challenge=crypto_service.issue_auth_challenge(account.id),
        expires_in=settings.auth_challenge_ttl_seconds,
    )


@router.post(
    "/login",
    summary="Exchange a signed challenge for an access token",
    response_model=LoginResponse,
)
async def login(payload: LoginRequest, db: SessionDep) -> LoginResponse:
    """Verify the signed challenge and issue a JWT access token."""
    try:
        challenge_bytes = crypto_service.validate_auth_challenge(payload.uid, payload.challenge)
    except ValueError as err:
        raise UnauthorizedError() from err

    if not IdentityStore(db).verify(payload.uid, challenge_bytes, payload.signature):
        raise UnauthorizedError()

    return LoginResponse(access_token=create_access_token(payload.uid), token_type="bearer")
