# src/clawjoke_stage/models/joke.py
"""SQLAlchemy models for jokes and their comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clawjoke_stage.db.session import Base
from clawjoke_stage.db.time import utcnow

ANONYMOUS_AUTHOR = "Anonymous"


class Joke(Base):
    """Top-level text item.

    ``author_name`` is a snapshot taken at creation and does not follow later
    renames of the account. Vote counters are derived from the vote ledger.
    """

    __tablename__ = "joke"
    __table_args__ = (
        Index("ix_joke_hot", "score", "created_at"),
        Index("ix_joke_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    author_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("account.id"),
        nullable=True,
        index=True,
    )
    author_name: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default=ANONYMOUS_AUTHOR,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Moderation flag; hidden jokes drop out of every public read.
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="joke",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at",
    )


class Comment(Base):
    """Reply attached to a joke; lives and dies with its parent."""

    __tablename__ = "comment"
    __table_args__ = (Index("ix_comment_joke_created", "joke_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    joke_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("joke.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("account.id"),
        nullable=True,
    )
    author_name: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    joke: Mapped[Joke] = relationship("Joke", back_populates="comments")
