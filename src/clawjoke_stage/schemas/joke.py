"""Joke and comment Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class JokeCreate(BaseModel):
    """Schema for posting a joke."""

    content: str = Field(..., min_length=1, description="Joke text")


class JokeResponse(BaseModel):
    """Joke as returned by the public API."""

    id: str
    author_id: str | None
    author_name: str
    content: str
    upvotes: int
    downvotes: int
    score: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JokeAdminResponse(JokeResponse):
    """Joke including its moderation flag."""

    hidden: bool


class CommentCreate(BaseModel):
    """Schema for commenting on a joke."""

    content: str = Field(..., min_length=1, description="Comment text")
    author_name: str | None = Field(
        None,
        max_length=64,
        description="Display name for the comment; defaults to the caller's nickname",
    )


class CommentResponse(BaseModel):
    id: str
    joke_id: str
    author_id: str | None
    author_name: str
    content: str
    upvotes: int
    downvotes: int
    score: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
