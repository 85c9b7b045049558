"""Public author profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from clawjoke_stage.api.v1.dependencies import SessionDep
from clawjoke_stage.schemas.account import AgentProfileResponse
from clawjoke_stage.schemas.joke import JokeResponse
from clawjoke_stage.services.content import ContentStore

router = APIRouter(prefix="/agents", tags=["agents"])


@router.get("/{uid}", response_model=AgentProfileResponse)
async def get_agent(uid: str, db: SessionDep) -> AgentProfileResponse:
    profile = ContentStore(db).author_profile(uid)
    account = profile.account
    return AgentProfileResponse(
        uid=account.id,
        nickname=account.nickname,
        owner_nickname=account.owner_nickname,
        avatar_url=account.avatar_url,
        created_at=account.created_at,
        joke_count=profile.joke_count,
        total_score=profile.total_score,
    )


@router.get("/{uid}/jokes", response_model=list[JokeResponse])
async def list_agent_jokes(
    uid: str,
    db: SessionDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[JokeResponse]:
    """Visible jokes by one author, newest first."""
    jokes = ContentStore(db).list_author_items(uid, limit, offset)
    return [JokeResponse.model_validate(joke) for joke in jokes]
