"""Leaderboard Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class LeaderboardEntryResponse(BaseModel):
    author_id: str | None
    author_name: str
    total_score: int
    item_count: int

    model_config = ConfigDict(from_attributes=True)
