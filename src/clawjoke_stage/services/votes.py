# src/clawjoke_stage/services/votes.py
"""Vote ledger shared by jokes and comments.

Each (target, voter) pair owns at most one vote row. A voter is looked up by
its account slot or its fingerprint slot, a repeat vote overwrites the row in
place, and the target's counters are re-aggregated from the ledger in the
same transaction as the write.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clawjoke_stage.db.session import write_unit
from clawjoke_stage.models import Comment, Joke, Vote
from clawjoke_stage.models.vote import TARGET_COMMENT, TARGET_JOKE
from clawjoke_stage.services.errors import NotFoundError, UnauthorizedError, ValidationError
from clawjoke_stage.services.identity import IdentityStore

logger = logging.getLogger(__name__)

UPVOTE = 1
DOWNVOTE = -1
VOTE_VALUES = (UPVOTE, DOWNVOTE)

# A unique-constraint race is resolved by re-reading and overwriting.
MAX_WRITE_ATTEMPTS = 3


@dataclass(frozen=True)
class VoterKey:
    """Who is voting.

    Authenticated voters carry their account id and, when known, the network
    fingerprint of the request; anonymous voters carry only the fingerprint.
    """

    account_id: str | None = None
    fingerprint: str | None = None

    @classmethod
    def authenticated(cls, account_id: str, fingerprint: str | None = None) -> VoterKey:
        return cls(account_id=account_id, fingerprint=fingerprint)

    @classmethod
    def anonymous(cls, fingerprint: str) -> VoterKey:
        return cls(account_id=None, fingerprint=fingerprint)


@dataclass(frozen=True)
class VoteOutcome:
    """Target counters after a vote was recorded."""

    target_type: str
    target_id: str
    value: int
    upvotes: int
    downvotes: int
    score: int
    created: bool


class VoteLedger:
    """Records votes and keeps target counters consistent with the ledger."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _load_target(self, target_type: str, target_id: str) -> Joke | Comment:
        if target_type == TARGET_JOKE:
            joke = self.db.get(Joke, target_id)
            if joke is None or joke.hidden:
                raise NotFoundError("Joke not found")
            return joke
        if target_type == TARGET_COMMENT:
            comment = self.db.get(Comment, target_id)
            if comment is None or comment.joke.hidden:
                raise NotFoundError("Comment not found")
            return comment
        raise ValidationError(f"Unknown vote target: {target_type}", code="invalid_target")

    def _check_voter(self, voter: VoterKey) -> None:
        if voter.account_id is None and voter.fingerprint is None:
            raise ValidationError("Voter identity is required", code="invalid_voter")
        if voter.account_id is not None:
            account = IdentityStore(self.db).get(voter.account_id)
            if account is None:
                raise UnauthorizedError()
            IdentityStore.ensure_active(account)

    def _find_existing(self, target_type: str, target_id: str, voter: VoterKey) -> Vote | None:
        slots = []
        if voter.account_id is not None:
            slots.append(Vote.voter_account_id == voter.account_id)
        if voter.fingerprint is not None:
            slots.append(Vote.voter_fingerprint == voter.fingerprint)

        rows = list(
            self.db.scalars(
                select(Vote).where(
                    Vote.target_type == target_type,
                    Vote.target_id == target_id,
                    or_(*slots),
                )
            )
        )
        # Prefer the row owned by the account over a fingerprint match.
        for row in rows:
            if voter.account_id is not None and row.voter_account_id == voter.account_id:
                return row
        return rows[0] if rows else None

    def _recompute(self, target: Joke | Comment, target_type: str) -> tuple[int, int, int]:
        counts = dict(
            self.db.execute(
                select(Vote.value, func.count())
                .where(Vote.target_type == target_type, Vote.target_id == target.id)
                .group_by(Vote.value)
            ).all()
        )
        target.upvotes = int(counts.get(UPVOTE, 0))
        target.downvotes = int(counts.get(DOWNVOTE, 0))
        target.score = target.upvotes - target.downvotes
        return target.upvotes, target.downvotes, target.score

    def cast_vote(
        self,
        target_type: str,
        target_id: str,
        voter: VoterKey,
        value: int,
    ) -> VoteOutcome:
        """Record ``voter``'s vote on a joke or comment.

        Voting the same value twice changes nothing; switching sign moves the
        score by exactly two. There is no way to retract a vote.

        Raises:
            ValidationError: If ``value`` is not +1/-1 or the voter is empty
            UnauthorizedError: If the voting account is unknown or banned
            NotFoundError: If the target does not exist or is hidden
        """
        if value not in VOTE_VALUES:
            raise ValidationError("Vote value must be 1 or -1", code="invalid_vote")
        attempt = 0
        while True:
            attempt += 1
            try:
                with write_unit(self.db):
                    self._check_voter(voter)
                    target = self._load_target(target_type, target_id)
                    existing = self._find_existing(target_type, target_id, voter)
                    created = existing is None
                    if existing is None:
                        self.db.add(
                            Vote(
                                id=str(uuid.uuid4()),
                                target_type=target_type,
                                target_id=target_id,
                                voter_account_id=voter.account_id,
                                voter_fingerprint=voter.fingerprint,
                                value=value,
                            )
                        )
                    elif existing.value != value:
                        existing.value = value
                    self.db.flush()
                    upvotes, downvotes, score = self._recompute(target, target_type)
            except IntegrityError:
                if attempt >= MAX_WRITE_ATTEMPTS:
                    raise
                logger.debug(
                    "Concurrent vote on %s %s; retrying as overwrite",
                    target_type,
                    target_id,
                )
                continue

            return VoteOutcome(
                target_type=target_type,
                target_id=target_id,
                value=value,
                upvotes=upvotes,
                downvotes=downvotes,
                score=score,
                created=created,
            )
