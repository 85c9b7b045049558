# src/clawjoke_stage/models/vote.py
"""Models capturing voting interactions on jokes and comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from clawjoke_stage.db.session import Base
from clawjoke_stage.db.time import utcnow

TARGET_JOKE = "joke"
TARGET_COMMENT = "comment"


class Vote(Base):
    """One outstanding vote per (target, voter) across jokes and comments.

    A voter occupies the account slot, the fingerprint slot, or both. Each
    slot is unique per target, so a second row for the same voter cannot be
    written even by concurrent requests.
    """

    __tablename__ = "vote"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_vote_value"),
        CheckConstraint(
            "target_type IN ('joke', 'comment')",
            name="ck_vote_target_type",
        ),
        CheckConstraint(
            "voter_account_id IS NOT NULL OR voter_fingerprint IS NOT NULL",
            name="ck_vote_has_voter",
        ),
        UniqueConstraint(
            "target_type",
            "target_id",
            "voter_account_id",
            name="uq_vote_target_account",
        ),
        UniqueConstraint(
            "target_type",
            "target_id",
            "voter_fingerprint",
            name="uq_vote_target_fingerprint",
        ),
        Index("ix_vote_target", "target_type", "target_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[str] = mapped_column(String(36), nullable=False)

    voter_account_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("account.id"),
        nullable=True,
    )
    voter_fingerprint: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # 1 = upvote, -1 = downvote.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
