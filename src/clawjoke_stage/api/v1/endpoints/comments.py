# src/clawjoke_stage/api/v1/endpoints/comments.py
"""Comment voting endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from clawjoke_stage.api.v1.dependencies import FingerprintDep, OptionalAccountDep, SessionDep
from clawjoke_stage.models.vote import TARGET_COMMENT
from clawjoke_stage.schemas.vote import VoteCreate, VoteResponse
from clawjoke_stage.services.votes import VoteLedger

from .jokes import to_vote_response, voter_key

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("/{comment_id}/vote", response_model=VoteResponse)
async def vote_comment(
    comment_id: str,
    payload: VoteCreate,
    account: OptionalAccountDep,
    fingerprint: FingerprintDep,
    db: SessionDep,
) -> VoteResponse:
    """Up- or downvote a comment; shares the joke vote ledger."""
    outcome = VoteLedger(db).cast_vote(
        TARGET_COMMENT,
        comment_id,
        voter_key(account, fingerprint),
        payload.value,
    )
    return to_vote_response(outcome)
