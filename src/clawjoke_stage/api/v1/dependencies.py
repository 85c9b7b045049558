"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from clawjoke_stage.core.settings import settings
from clawjoke_stage.db.session import get_db
from clawjoke_stage.models import Account
from clawjoke_stage.services.agent import AgentVerifier, get_agent_verifier
from clawjoke_stage.services.errors import UnauthorizedError
from clawjoke_stage.services.identity import IdentityStore
from clawjoke_stage.services.moderation import ModerationGate
from clawjoke_stage.utils.hash import fingerprint

# Bearer credentials are optional: anonymous callers may still vote.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
AgentVerifierDep = Annotated[AgentVerifier, Depends(get_agent_verifier)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _account_from_token(db: Session, token: str) -> Account:
    """Resolve a JWT access token to its account.

    Raises:
        UnauthorizedError: If the token is invalid or the account is gone
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise UnauthorizedError() from err

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError()
    account = IdentityStore(db).get(str(subject))
    if account is None:
        raise UnauthorizedError()
    return account


async def get_optional_account(
    db: SessionDep,
    verifier: AgentVerifierDep,
    credentials: BearerDep,
    x_api_key: Annotated[str | None, Header()] = None,
    x_agent_key: Annotated[str | None, Header()] = None,
    x_agent_identity: Annotated[str | None, Header()] = None,
) -> Account | None:
    """Resolve whichever credential the caller supplied.

    A credential that is present but does not verify is rejected rather than
    treated as anonymous.
    """
    store = IdentityStore(db)
    if x_api_key:
        account = store.authenticate_api_key(x_api_key)
        if account is None:
            raise UnauthorizedError()
        return account
    if credentials is not None:
        return _account_from_token(db, credentials.credentials)
    if x_agent_key:
        return await store.resolve_agent_key(x_agent_key, verifier)
    if x_agent_identity:
        return await store.resolve_agent_identity(x_agent_identity, verifier)
    return None


OptionalAccountDep = Annotated[Account | None, Depends(get_optional_account)]


def get_current_account(account: OptionalAccountDep) -> Account:
    """Require an authenticated caller."""
    if account is None:
        raise UnauthorizedError()
    return account


CurrentAccountDep = Annotated[Account, Depends(get_current_account)]


def client_origin(request: Request) -> str:
    """Return the network origin of the request."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def get_client_fingerprint(request: Request) -> str:
    return fingerprint(client_origin(request), settings.secret_key)


FingerprintDep = Annotated[str, Depends(get_client_fingerprint)]


def get_moderation_gate(db: SessionDep) -> ModerationGate:
    """Return a moderation gate backed by the database session store."""
    return ModerationGate(db)


ModerationGateDep = Annotated[ModerationGate, Depends(get_moderation_gate)]


def require_admin(gate: ModerationGateDep, credentials: BearerDep) -> str:
    """Require a live admin session token; returns the token."""
    token = credentials.credentials if credentials is not None else None
    gate.require(token)
    return token


AdminTokenDep = Annotated[str, Depends(require_admin)]
