# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nacl.signing import SigningKey
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "clawjoke-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from clawjoke_stage.api.v1.endpoints.auth import create_access_token  # noqa: E402
from clawjoke_stage.db.session import build_engine, create_tables  # noqa: E402
from clawjoke_stage.db.session import get_db as app_get_session  # noqa: E402
from clawjoke_stage.db.time import utcnow  # noqa: E402
from clawjoke_stage.main import app as fastapi_app  # noqa: E402
from clawjoke_stage.models import Account, Joke  # noqa: E402
from clawjoke_stage.services.agent import (  # noqa: E402
    AgentProviderConfig,
    AgentVerifier,
    get_agent_verifier,
)
from clawjoke_stage.services.crypto import encode_b64  # noqa: E402
from clawjoke_stage.services.identity import IdentityStore  # noqa: E402

TEST_DB_URL = "sqlite://"
PROVIDER_BASE_URL = "https://agents.test"
PROVIDER_APP_KEY = "test-app-key"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    create_tables(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def register_account(
    db: Session,
    nickname: str,
    owner_nickname: str = "Owner",
    public_key: str | None = None,
) -> tuple[Account, str | None]:
    """Register an account through the identity store; returns it with its API key."""
    registration = IdentityStore(db).register(nickname, owner_nickname, public_key=public_key)
    return registration.account, registration.api_key


@pytest.fixture()
def signing_identity() -> dict[str, Any]:
    """Return a fresh Ed25519 key pair in the encodings clients use."""
    signing_key = SigningKey.generate()
    pubkey_bytes = signing_key.verify_key.encode()
    return {
        "private_key": signing_key,
        "pubkey_bytes": pubkey_bytes,
        "pubkey_b64": encode_b64(pubkey_bytes),
        "pubkey_hex": pubkey_bytes.hex(),
    }


@pytest.fixture()
def test_account(db_session: Session) -> tuple[Account, str]:
    """Primary API-key account and its key."""
    account, api_key = register_account(db_session, "Bot1", "Alice")
    return account, api_key


@pytest.fixture()
def other_account(db_session: Session) -> tuple[Account, str]:
    account, api_key = register_account(db_session, "Bot2", "Bob")
    return account, api_key


@pytest.fixture()
def api_headers(test_account: tuple[Account, str]) -> dict[str, str]:
    return {"X-API-Key": test_account[1]}


@pytest.fixture()
def other_api_headers(other_account: tuple[Account, str]) -> dict[str, str]:
    return {"X-API-Key": other_account[1]}


@pytest.fixture()
def bearer_headers(test_account: tuple[Account, str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(test_account[0].id)}"}


@pytest.fixture()
def make_joke(db_session: Session) -> Callable[..., Joke]:
    """Insert a joke directly, with explicit counters and age."""

    def _make(
        content: str = "Why did the crab never share? Because he was shellfish.",
        *,
        author: Account | None = None,
        score: int = 0,
        hidden: bool = False,
        age_seconds: int = 0,
    ) -> Joke:
        joke = Joke(
            id=os.urandom(16).hex(),
            author_id=author.id if author else None,
            author_name=author.nickname if author else "Anonymous",
            content=content,
            upvotes=max(score, 0),
            downvotes=max(-score, 0),
            score=score,
            hidden=hidden,
            created_at=utcnow() - timedelta(seconds=age_seconds),
        )
        db_session.add(joke)
        db_session.commit()
        return joke

    return _make


@pytest.fixture()
def test_joke(make_joke: Callable[..., Joke], test_account: tuple[Account, str]) -> Joke:
    return make_joke(author=test_account[0])


@pytest.fixture()
def provider_handler() -> dict[str, Callable[[httpx.Request], httpx.Response]]:
    """Mutable routing table for the mocked agent provider, keyed by path."""
    return {}


@pytest.fixture()
def agent_verifier(provider_handler: dict[str, Callable[[httpx.Request], httpx.Response]]) -> AgentVerifier:
    def _dispatch(request: httpx.Request) -> httpx.Response:
        handler = provider_handler.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        return handler(request)

    config = AgentProviderConfig(
        name="moltbook",
        base_url=PROVIDER_BASE_URL,
        app_key=PROVIDER_APP_KEY,
        audience="clawjoke.test",
        timeout_seconds=1.0,
    )
    return AgentVerifier(config, transport=httpx.MockTransport(_dispatch))


@pytest.fixture()
def override_agent_verifier(app: FastAPI, agent_verifier: AgentVerifier) -> Iterator[AgentVerifier]:
    app.dependency_overrides[get_agent_verifier] = lambda: agent_verifier
    try:
        yield agent_verifier
    finally:
        app.dependency_overrides.pop(get_agent_verifier, None)
