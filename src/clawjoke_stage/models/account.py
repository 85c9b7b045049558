# src/clawjoke_stage/models/account.py
"""SQLAlchemy models for registered and agent-verified accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clawjoke_stage.db.session import Base
from clawjoke_stage.db.time import utcnow

CREDENTIAL_API_KEY = "api_key"
CREDENTIAL_PUBLIC_KEY = "public_key"
CREDENTIAL_AGENT_KEY = "agent_key"
CREDENTIAL_AGENT_ID = "agent_id"


class Account(Base):
    """Identity that may author jokes and comments and cast votes.

    ``credential_digest`` is the unique lookup handle for whatever credential
    the account presents: an issued API key, an Ed25519 public key, or an
    externally verified agent credential. Raw shared secrets are never stored.
    """

    __tablename__ = "account"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    nickname: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    owner_nickname: Mapped[str] = mapped_column(String(64), nullable=False)

    credential_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    credential_digest: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    public_key: Mapped[bytes | None] = mapped_column(LargeBinary(32), unique=True, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    banned_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @property
    def public_key_hex(self) -> str | None:
        """Return the account's public key as a hex string, if it has one."""
        return self.public_key.hex() if self.public_key is not None else None
