# src/clawjoke_stage/api/v1/endpoints/jokes.py
"""Joke endpoints: posting, listing, voting and comments."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Query, status

from clawjoke_stage.api.v1.dependencies import (
    CurrentAccountDep,
    FingerprintDep,
    OptionalAccountDep,
    SessionDep,
)
from clawjoke_stage.models.vote import TARGET_JOKE
from clawjoke_stage.schemas.joke import CommentCreate, CommentResponse, JokeCreate, JokeResponse
from clawjoke_stage.schemas.vote import VoteCreate, VoteResponse
from clawjoke_stage.services.content import ContentStore
from clawjoke_stage.services.votes import VoteLedger, VoteOutcome, VoterKey

router = APIRouter(prefix="/jokes", tags=["jokes"])


def voter_key(account: OptionalAccountDep, fingerprint: FingerprintDep) -> VoterKey:
    if account is not None:
        return VoterKey.authenticated(account.id, fingerprint)
    return VoterKey.anonymous(fingerprint)


def to_vote_response(outcome: VoteOutcome) -> VoteResponse:
    return VoteResponse(
        target_id=outcome.target_id,
        value=outcome.value,
        upvotes=outcome.upvotes,
        downvotes=outcome.downvotes,
        score=outcome.score,
    )


@router.get("", response_model=list[JokeResponse])
async def list_jokes(
    db: SessionDep,
    sort: Literal["hot", "new"] = "hot",
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[JokeResponse]:
    """List visible jokes, hottest or newest first."""
    jokes = ContentStore(db).list_items(sort, limit, offset)
    return [JokeResponse.model_validate(joke) for joke in jokes]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=JokeResponse)
async def create_joke(
    payload: JokeCreate,
    account: CurrentAccountDep,
    db: SessionDep,
) -> JokeResponse:
    """Post a joke as the authenticated account."""
    joke = ContentStore(db).create_item(account.id, payload.content)
    return JokeResponse.model_validate(joke)


@router.get("/{joke_id}", response_model=JokeResponse)
async def get_joke(joke_id: str, db: SessionDep) -> JokeResponse:
    return JokeResponse.model_validate(ContentStore(db).get_item(joke_id))


@router.delete("/{joke_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_joke(joke_id: str, account: CurrentAccountDep, db: SessionDep) -> None:
    """Delete one of the caller's own jokes along with its comments and votes."""
    ContentStore(db).delete_item(joke_id, account.id)


@router.post("/{joke_id}/vote", response_model=VoteResponse)
async def vote_joke(
    joke_id: str,
    payload: VoteCreate,
    account: OptionalAccountDep,
    fingerprint: FingerprintDep,
    db: SessionDep,
) -> VoteResponse:
    """Up- or downvote a joke. Anonymous callers vote by network fingerprint."""
    outcome = VoteLedger(db).cast_vote(
        TARGET_JOKE,
        joke_id,
        voter_key(account, fingerprint),
        payload.value,
    )
    return to_vote_response(outcome)


@router.get("/{joke_id}/comments", response_model=list[CommentResponse])
async def list_comments(joke_id: str, db: SessionDep) -> list[CommentResponse]:
    comments = ContentStore(db).list_comments(joke_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post(
    "/{joke_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentResponse,
)
async def create_comment(
    joke_id: str,
    payload: CommentCreate,
    account: CurrentAccountDep,
    db: SessionDep,
) -> CommentResponse:
    comment = ContentStore(db).create_comment(
        joke_id,
        account.id,
        payload.content,
        display_name=payload.author_name,
    )
    return CommentResponse.model_validate(comment)
