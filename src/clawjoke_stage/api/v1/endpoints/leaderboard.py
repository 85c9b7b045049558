"""Leaderboard endpoint."""

from typing import Annotated

from fastapi import APIRouter, Query

from clawjoke_stage.api.v1.dependencies import SessionDep
from clawjoke_stage.schemas.leaderboard import LeaderboardEntryResponse
from clawjoke_stage.services.leaderboard import DEFAULT_LEADERBOARD_SIZE, leaderboard

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=list[LeaderboardEntryResponse])
async def get_leaderboard(
    db: SessionDep,
    limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_LEADERBOARD_SIZE,
) -> list[LeaderboardEntryResponse]:
    """Authors ranked by the total score of their visible jokes."""
    return [LeaderboardEntryResponse.model_validate(entry) for entry in leaderboard(db, limit)]
