"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote on a joke or comment."""

    # Range is checked by the vote ledger so the error carries its reason code.
    value: int = Field(..., description="1 for upvote, -1 for downvote")


class VoteResponse(BaseModel):
    """Counters of the target after the vote was recorded."""

    target_id: str
    value: int
    upvotes: int
    downvotes: int
    score: int
