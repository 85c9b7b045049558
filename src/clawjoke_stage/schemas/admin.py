"""Admin moderation Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .joke import CommentResponse, JokeAdminResponse


class AdminStatusResponse(BaseModel):
    initialized: bool


class AdminInitRequest(BaseModel):
    password: str = Field(..., description="Initial admin password")


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminLoginResponse(BaseModel):
    token: str = Field(..., description="Bearer token for admin endpoints")
    expires_at: datetime


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


class AdminAccountResponse(BaseModel):
    """Account as listed to moderators."""

    uid: str = Field(..., validation_alias="id")
    nickname: str
    owner_nickname: str
    credential_kind: str
    created_at: datetime
    banned: bool
    banned_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AdminAccountPage(BaseModel):
    users: list[AdminAccountResponse]
    total: int
    limit: int
    offset: int


class AdminJokePage(BaseModel):
    jokes: list[JokeAdminResponse]
    total: int
    hidden_count: int
    limit: int
    offset: int


class AdminCommentPage(BaseModel):
    comments: list[CommentResponse]
    total: int
    limit: int
    offset: int


class ToggleResponse(BaseModel):
    id: str
    hidden: bool | None = None
    banned: bool | None = None
