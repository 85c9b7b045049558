# src/clawjoke_stage/services/moderation.py
"""Admin moderation gate: credential, sessions and gated listings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Generic, Protocol, TypeVar

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from clawjoke_stage.core.security import generate_admin_token, hash_password, verify_password
from clawjoke_stage.core.settings import settings
from clawjoke_stage.db.session import write_unit
from clawjoke_stage.db.time import utcnow
from clawjoke_stage.models import Account, AdminSession, AdminUser, Comment, Joke
from clawjoke_stage.services.content import ContentStore
from clawjoke_stage.services.errors import (
    AlreadyInitializedError,
    NotInitializedError,
    UnauthorizedError,
    ValidationError,
)
from clawjoke_stage.services.identity import IdentityStore
from clawjoke_stage.utils.hash import blake3_hexdigest

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class AdminToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class StoredSession:
    username: str
    expires_at: datetime


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a gated listing together with the unpaged total."""

    items: list[T]
    total: int
    limit: int
    offset: int


def _token_digest(token: str) -> str:
    return blake3_hexdigest(token.encode("utf-8"))


class SessionStore(Protocol):
    """Storage for admin sessions, keyed by a digest of the bearer token."""

    def put(self, token_digest: str, username: str, expires_at: datetime) -> None: ...

    def get(self, token_digest: str) -> StoredSession | None: ...

    def delete(self, token_digest: str) -> None: ...

    def delete_for(self, username: str) -> None: ...


class DatabaseSessionStore:
    """Session store backed by the ``admin_session`` table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def put(self, token_digest: str, username: str, expires_at: datetime) -> None:
        with write_unit(self.db):
            self.db.add(AdminSession(token_digest=token_digest, username=username, expires_at=expires_at))

    def get(self, token_digest: str) -> StoredSession | None:
        row = self.db.get(AdminSession, token_digest)
        if row is None:
            return None
        return StoredSession(username=row.username, expires_at=row.expires_at)

    def delete(self, token_digest: str) -> None:
        with write_unit(self.db):
            self.db.execute(delete(AdminSession).where(AdminSession.token_digest == token_digest))

    def delete_for(self, username: str) -> None:
        with write_unit(self.db):
            self.db.execute(delete(AdminSession).where(AdminSession.username == username))


class InMemorySessionStore:
    """Process-local session store, used in tests and single-process setups."""

    def __init__(self) -> None:
        self._sessions: dict[str, StoredSession] = {}

    def put(self, token_digest: str, username: str, expires_at: datetime) -> None:
        self._sessions[token_digest] = StoredSession(username=username, expires_at=expires_at)

    def get(self, token_digest: str) -> StoredSession | None:
        return self._sessions.get(token_digest)

    def delete(self, token_digest: str) -> None:
        self._sessions.pop(token_digest, None)

    def delete_for(self, username: str) -> None:
        for digest in [d for d, s in self._sessions.items() if s.username == username]:
            del self._sessions[digest]


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ModerationGate:
    """Admin authentication and the operations it unlocks.

    Sessions are bearer tokens valid while ``now < expires_at``; an expired
    session is removed the first time it is presented. Every gated method
    expects the caller to have passed :meth:`require` first.
    """

    def __init__(
        self,
        db: Session,
        sessions: SessionStore | None = None,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self.db = db
        self.sessions = sessions if sessions is not None else DatabaseSessionStore(db)
        self.clock = clock
        self.username = settings.admin_username

    # --- credential ------------------------------------------------------------

    def _admin(self) -> AdminUser | None:
        return self.db.get(AdminUser, self.username)

    def is_initialized(self) -> bool:
        return self._admin() is not None

    def _check_password(self, password: str) -> None:
        if len(password) < settings.admin_password_min_length:
            raise ValidationError(
                f"Password must be at least {settings.admin_password_min_length} characters",
                code="password_too_short",
            )

    def initialize(self, password: str) -> None:
        """Create the admin credential. Only allowed once."""
        with write_unit(self.db):
            if self.is_initialized():
                raise AlreadyInitializedError("Admin is already initialized")
            self._check_password(password)
            self.db.add(AdminUser(username=self.username, password_hash=hash_password(password)))
        logger.info("Admin credential initialized")

    def login(self, username: str, password: str) -> AdminToken:
        """Exchange the admin username and password for a session token."""
        admin = self._admin()
        if admin is None:
            raise NotInitializedError("Admin is not initialized")
        if username != admin.username or not verify_password(password, admin.password_hash):
            logger.warning("Failed admin login attempt")
            raise UnauthorizedError()

        token = generate_admin_token()
        expires_at = self.clock() + timedelta(hours=settings.admin_session_hours)
        self.sessions.put(_token_digest(token), admin.username, expires_at)
        logger.info("Admin %s logged in", admin.username)
        return AdminToken(token=token, expires_at=expires_at)

    def verify(self, token: str | None) -> bool:
        if not token:
            return False
        digest = _token_digest(token)
        stored = self.sessions.get(digest)
        if stored is None:
            return False
        if self.clock() < stored.expires_at:
            return True
        self.sessions.delete(digest)
        return False

    def require(self, token: str | None) -> None:
        """Raise ``UnauthorizedError`` unless ``token`` is a live session."""
        if not self.verify(token):
            raise UnauthorizedError()

    def logout(self, token: str) -> None:
        self.sessions.delete(_token_digest(token))

    def change_password(self, old_password: str, new_password: str) -> None:
        """Replace the admin password and end every open session."""
        with write_unit(self.db):
            admin = self._admin()
            if admin is None:
                raise NotInitializedError("Admin is not initialized")
            if not verify_password(old_password, admin.password_hash):
                raise UnauthorizedError()
            self._check_password(new_password)
            admin.password_hash = hash_password(new_password)
        self.sessions.delete_for(self.username)
        logger.info("Admin password changed; sessions revoked")

    # --- listings --------------------------------------------------------------

    def _page(self, stmt, count_stmt, limit: int, offset: int) -> Page:
        total = int(self.db.scalar(count_stmt) or 0)
        items = list(self.db.scalars(stmt.limit(limit).offset(offset)))
        return Page(items=items, total=total, limit=limit, offset=offset)

    def list_accounts(self, search: str | None = None, limit: int = 20, offset: int = 0) -> Page[Account]:
        where = []
        if search:
            pattern = _like(search)
            where.append(
                or_(
                    Account.nickname.ilike(pattern, escape="\\"),
                    Account.owner_nickname.ilike(pattern, escape="\\"),
                    Account.id.ilike(pattern, escape="\\"),
                )
            )
        stmt = select(Account).where(*where).order_by(Account.created_at.desc(), Account.id.desc())
        count_stmt = select(func.count(Account.id)).where(*where)
        return self._page(stmt, count_stmt, limit, offset)

    def list_jokes(
        self,
        search: str | None = None,
        *,
        hidden_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[Joke]:
        where = []
        if search:
            pattern = _like(search)
            where.append(
                or_(
                    Joke.content.ilike(pattern, escape="\\"),
                    Joke.author_name.ilike(pattern, escape="\\"),
                )
            )
        if hidden_only:
            where.append(Joke.hidden.is_(True))
        stmt = select(Joke).where(*where).order_by(Joke.created_at.desc(), Joke.id.desc())
        count_stmt = select(func.count(Joke.id)).where(*where)
        return self._page(stmt, count_stmt, limit, offset)

    def list_comments(self, search: str | None = None, limit: int = 20, offset: int = 0) -> Page[Comment]:
        where = []
        if search:
            pattern = _like(search)
            where.append(
                or_(
                    Comment.content.ilike(pattern, escape="\\"),
                    Comment.author_name.ilike(pattern, escape="\\"),
                )
            )
        stmt = select(Comment).where(*where).order_by(Comment.created_at.desc(), Comment.id.desc())
        count_stmt = select(func.count(Comment.id)).where(*where)
        return self._page(stmt, count_stmt, limit, offset)

    def hidden_count(self) -> int:
        return int(self.db.scalar(select(func.count(Joke.id)).where(Joke.hidden.is_(True))) or 0)

    # --- actions ---------------------------------------------------------------

    def set_hidden(self, joke_id: str, hidden: bool | None = None) -> Joke:
        """Hide or show a joke; ``None`` flips the current flag."""
        store = ContentStore(self.db)
        joke = store.get_item(joke_id, include_hidden=True)
        target = (not joke.hidden) if hidden is None else hidden
        return store.set_hidden(joke_id, target)

    def set_banned(self, account_id: str, banned: bool | None = None) -> Account:
        """Ban or unban an account; ``None`` flips the current flag."""
        with write_unit(self.db):
            account = IdentityStore(self.db).require(account_id)
            target = (not account.banned) if banned is None else banned
            changed = account.banned != target
            if changed:
                account.banned = target
                account.banned_at = self.clock() if target else None
        if changed:
            logger.info("Account %s %s", account_id, "banned" if target else "unbanned")
        return account
