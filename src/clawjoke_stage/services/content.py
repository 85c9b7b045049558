# src/clawjoke_stage/services/content.py
"""Content store for jokes and their comments."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from clawjoke_stage.core.settings import settings
from clawjoke_stage.db.session import write_unit
from clawjoke_stage.models import Account, Comment, Joke, Vote
from clawjoke_stage.models.joke import ANONYMOUS_AUTHOR
from clawjoke_stage.models.vote import TARGET_COMMENT, TARGET_JOKE
from clawjoke_stage.services.errors import ForbiddenError, NotFoundError, ValidationError
from clawjoke_stage.services.identity import IdentityStore

logger = logging.getLogger(__name__)

SORT_HOT = "hot"
SORT_NEW = "new"

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class AuthorProfile:
    """Public summary of an author's visible contributions."""

    account: Account
    joke_count: int
    total_score: int


def _check_length(text: str, minimum: int, maximum: int, *, what: str) -> str:
    cleaned = text.strip()
    if len(cleaned) < minimum:
        raise ValidationError(f"{what} too short (min {minimum} chars)", code="content_too_short")
    if len(cleaned) > maximum:
        raise ValidationError(f"{what} too long (max {maximum} chars)", code="content_too_long")
    return cleaned


def _order_clause(sort: str) -> tuple:
    if sort == SORT_HOT:
        return (Joke.score.desc(), Joke.created_at.desc(), Joke.id.desc())
    if sort == SORT_NEW:
        return (Joke.created_at.desc(), Joke.id.desc())
    raise ValidationError(f"Unknown sort key: {sort}", code="invalid_sort")


class ContentStore:
    """Creates, reads and lists jokes and comments."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _resolve_author(self, author_id: str | None) -> Account | None:
        if author_id is None:
            return None
        account = IdentityStore(self.db).get(author_id)
        if account is None:
            raise NotFoundError("Author not found", code="author_not_found")
        IdentityStore.ensure_active(account)
        return account

    # --- jokes ---------------------------------------------------------------

    def create_item(self, author_id: str | None, body: str) -> Joke:
        """Create a joke.

        Args:
            author_id: Authoring account, or None for unattributed content
            body: Joke text

        Returns:
            The persisted joke with zeroed counters

        Raises:
            NotFoundError: If ``author_id`` does not exist
            UnauthorizedError: If the author is banned
            ValidationError: If the body is outside the length bounds
        """
        content = _check_length(
            body,
            settings.joke_min_length,
            settings.joke_max_length,
            what="Joke",
        )
        with write_unit(self.db):
            author = self._resolve_author(author_id)
            joke = Joke(
                id=str(uuid.uuid4()),
                author_id=author.id if author else None,
                author_name=author.nickname if author else ANONYMOUS_AUTHOR,
                content=content,
                upvotes=0,
                downvotes=0,
                score=0,
                hidden=False,
            )
            self.db.add(joke)
        self.db.refresh(joke)
        logger.info("Joke %s created by %s", joke.id, joke.author_name)
        return joke

    def get_item(self, item_id: str, *, include_hidden: bool = False) -> Joke:
        """Return a joke; hidden jokes are not found unless asked for."""
        joke = self.db.get(Joke, item_id)
        if joke is None or (joke.hidden and not include_hidden):
            raise NotFoundError("Joke not found")
        return joke

    def list_items(
        self,
        sort: str = SORT_HOT,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        *,
        include_hidden: bool = False,
    ) -> list[Joke]:
        """List jokes by ``hot`` (score, then newest) or ``new`` (newest first)."""
        stmt = select(Joke)
        if not include_hidden:
            stmt = stmt.where(Joke.hidden.is_(False))
        stmt = stmt.order_by(*_order_clause(sort)).limit(limit).offset(offset)
        return list(self.db.scalars(stmt))

    def set_hidden(self, item_id: str, hidden: bool) -> Joke:
        """Set the moderation visibility flag. Setting the current value is a no-op."""
        with write_unit(self.db):
            joke = self.get_item(item_id, include_hidden=True)
            changed = joke.hidden != hidden
            joke.hidden = hidden
        if changed:
            logger.info("Joke %s %s", item_id, "hidden" if hidden else "unhidden")
        return joke

    def delete_item(self, item_id: str, account_id: str) -> None:
        """Delete a joke owned by ``account_id`` together with its comments and votes."""
        with write_unit(self.db):
            joke = self.get_item(item_id, include_hidden=True)
            if joke.author_id is None or joke.author_id != account_id:
                raise ForbiddenError("Only the author can delete this joke")

            comment_ids = select(Comment.id).where(Comment.joke_id == item_id)
            self.db.execute(
                delete(Vote).where(
                    Vote.target_type == TARGET_COMMENT,
                    Vote.target_id.in_(comment_ids),
                )
            )
            self.db.execute(
                delete(Vote).where(Vote.target_type == TARGET_JOKE, Vote.target_id == item_id)
            )
            self.db.delete(joke)
        logger.info("Joke %s deleted by its author %s", item_id, account_id)

    # --- comments ------------------------------------------------------------

    def create_comment(
        self,
        item_id: str,
        author_id: str | None,
        body: str,
        display_name: str | None = None,
    ) -> Comment:
        """Attach a comment to a visible joke.

        The display name defaults to the author's nickname.
        """
        with write_unit(self.db):
            author = self._resolve_author(author_id)
            joke = self.get_item(item_id)
            content = _check_length(
                body,
                settings.comment_min_length,
                settings.comment_max_length,
                what="Comment",
            )
            name = display_name or (author.nickname if author else ANONYMOUS_AUTHOR)
            comment = Comment(
                id=str(uuid.uuid4()),
                joke_id=joke.id,
                author_id=author.id if author else None,
                author_name=name,
                content=content,
                upvotes=0,
                downvotes=0,
                score=0,
            )
            self.db.add(comment)
        self.db.refresh(comment)
        return comment

    def list_comments(self, item_id: str) -> list[Comment]:
        """Return a visible joke's comments, oldest first."""
        self.get_item(item_id)
        stmt = (
            select(Comment)
            .where(Comment.joke_id == item_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(self.db.scalars(stmt))

    # --- authors -------------------------------------------------------------

    def author_profile(self, account_id: str) -> AuthorProfile:
        account = self.db.get(Account, account_id)
        if account is None:
            raise NotFoundError("Agent not found")
        joke_count, total_score = self.db.execute(
            select(func.count(Joke.id), func.coalesce(func.sum(Joke.score), 0)).where(
                Joke.author_id == account_id,
                Joke.hidden.is_(False),
            )
        ).one()
        return AuthorProfile(
            account=account,
            joke_count=int(joke_count),
            total_score=int(total_score),
        )

    def list_author_items(
        self,
        account_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Joke]:
        if self.db.get(Account, account_id) is None:
            raise NotFoundError("Agent not found")
        stmt = (
            select(Joke)
            .where(Joke.author_id == account_id, Joke.hidden.is_(False))
            .order_by(Joke.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.scalars(stmt))
