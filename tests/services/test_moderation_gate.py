"""Tests for the admin moderation gate."""

from datetime import datetime, timedelta

import pytest

from clawjoke_stage.core.security import ADMIN_TOKEN_PREFIX
from clawjoke_stage.models import AdminSession, AdminUser
from clawjoke_stage.services.errors import (
    AlreadyInitializedError,
    NotInitializedError,
    UnauthorizedError,
    ValidationError,
)
from clawjoke_stage.services.moderation import (
    DatabaseSessionStore,
    InMemorySessionStore,
    ModerationGate,
)

PASSWORD = "hunter22"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture(params=["memory", "database"])
def gate(request, db_session, clock) -> ModerationGate:
    store = InMemorySessionStore() if request.param == "memory" else DatabaseSessionStore(db_session)
    return ModerationGate(db_session, store, clock=clock)


def test_initialize_once(db_session, gate) -> None:
    assert gate.is_initialized() is False
    gate.initialize(PASSWORD)
    assert gate.is_initialized() is True

    stored = db_session.get(AdminUser, "admin")
    assert stored.password_hash != PASSWORD
    assert stored.password_hash.startswith("$argon2id$")

    with pytest.raises(AlreadyInitializedError):
        gate.initialize("another-password")


def test_initialize_rejects_short_password(gate) -> None:
    with pytest.raises(ValidationError) as exc_info:
        gate.initialize("12345")
    assert exc_info.value.code == "password_too_short"
    assert gate.is_initialized() is False


def test_login_before_initialize(gate) -> None:
    with pytest.raises(NotInitializedError):
        gate.login("admin", PASSWORD)


@pytest.mark.parametrize(("username", "password"), [("admin", "wrong-pass"), ("root", PASSWORD)])
def test_login_failures_are_uniform(gate, username, password) -> None:
    gate.initialize(PASSWORD)
    with pytest.raises(UnauthorizedError) as exc_info:
        gate.login(username, password)
    assert exc_info.value.detail == "Unauthorized"


def test_token_valid_until_expiry(gate, clock) -> None:
    gate.initialize(PASSWORD)
    issued = gate.login("admin", PASSWORD)

    assert issued.token.startswith(ADMIN_TOKEN_PREFIX)
    assert issued.expires_at == clock.now + timedelta(hours=24)

    clock.now = issued.expires_at - timedelta(milliseconds=1)
    assert gate.verify(issued.token) is True

    clock.now = issued.expires_at + timedelta(milliseconds=1)
    assert gate.verify(issued.token) is False

    # The expired session was dropped on lookup.
    clock.now = issued.expires_at - timedelta(hours=1)
    assert gate.verify(issued.token) is False


def test_token_at_exact_expiry_is_rejected(gate, clock) -> None:
    gate.initialize(PASSWORD)
    issued = gate.login("admin", PASSWORD)
    clock.now = issued.expires_at
    assert gate.verify(issued.token) is False


def test_require_rejects_missing_and_unknown_tokens(gate) -> None:
    with pytest.raises(UnauthorizedError):
        gate.require(None)
    with pytest.raises(UnauthorizedError):
        gate.require("admin_" + "0" * 48)


def test_database_store_keeps_only_token_digest(db_session, clock) -> None:
    gate = ModerationGate(db_session, clock=clock)
    gate.initialize(PASSWORD)
    issued = gate.login("admin", PASSWORD)

    rows = db_session.query(AdminSession).all()
    assert len(rows) == 1
    assert rows[0].token_digest != issued.token
    assert gate.verify(issued.token) is True


def test_change_password_revokes_sessions(gate) -> None:
    gate.initialize(PASSWORD)
    issued = gate.login("admin", PASSWORD)

    with pytest.raises(UnauthorizedError):
        gate.change_password("not-the-password", "newpassword")

    gate.change_password(PASSWORD, "newpassword")

    assert gate.verify(issued.token) is False
    with pytest.raises(UnauthorizedError):
        gate.login("admin", PASSWORD)
    assert gate.verify(gate.login("admin", "newpassword").token) is True


def test_listings_search_and_totals(db_session, gate, make_joke, test_account, other_account) -> None:
    make_joke("The penguin joke", author=test_account[0])
    make_joke("A crab joke", author=other_account[0], hidden=True)
    make_joke("Another penguin joke", author=other_account[0], hidden=True)

    everything = gate.list_jokes()
    penguins = gate.list_jokes("penguin", limit=1)
    hidden = gate.list_jokes(hidden_only=True)

    assert everything.total == 3
    assert (penguins.total, len(penguins.items)) == (2, 1)
    assert hidden.total == 2
    assert gate.hidden_count() == 2

    users = gate.list_accounts("bob")
    assert [account.id for account in users.items] == [other_account[0].id]
    assert gate.list_accounts().total == 2


def test_comment_listing_search(db_session, gate, test_joke, test_account) -> None:
    from clawjoke_stage.services.content import ContentStore

    store = ContentStore(db_session)
    store.create_comment(test_joke.id, test_account[0].id, "100% funny")
    store.create_comment(test_joke.id, test_account[0].id, "meh")

    assert gate.list_comments().total == 2
    # Wildcards in the search term match literally.
    assert gate.list_comments("100%").total == 1
    assert gate.list_comments("%").total == 1


def test_toggle_hidden_and_ban(db_session, gate, test_joke, test_account) -> None:
    assert gate.set_hidden(test_joke.id).hidden is True
    assert gate.set_hidden(test_joke.id).hidden is False
    assert gate.set_hidden(test_joke.id, True).hidden is True
    assert gate.set_hidden(test_joke.id, True).hidden is True

    account = gate.set_banned(test_account[0].id)
    assert account.banned is True
    assert account.banned_at is not None
    account = gate.set_banned(test_account[0].id)
    assert account.banned is False
    assert account.banned_at is None


def test_reinitialize_reports_already_initialized_before_password_rules(gate) -> None:
    gate.initialize(PASSWORD)

    with pytest.raises(AlreadyInitializedError):
        gate.initialize("123")
