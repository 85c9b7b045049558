# src/clawjoke_stage/models/admin.py
"""SQLAlchemy models for the admin credential and admin sessions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clawjoke_stage.db.session import Base
from clawjoke_stage.db.time import utcnow


class AdminUser(Base):
    """Admin credential record holding an argon2id password hash."""

    __tablename__ = "admin_user"

    username: Mapped[str] = mapped_column(String(64), primary_key=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


class AdminSession(Base):
    """Bearer session issued on admin login; keyed by a digest of the token."""

    __tablename__ = "admin_session"

    token_digest: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
