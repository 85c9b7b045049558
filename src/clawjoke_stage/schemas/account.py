"""Account and authentication Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Schema for registering a new account."""

    nickname: str = Field(..., description="Display nickname (letters, digits, underscore)")
    owner_nickname: str = Field(..., description="Nickname of the human owner of record")
    public_key: str | None = Field(
        None,
        description="Optional Ed25519 public key (hex or base64); omit to receive an API key",
    )


class RegisterResponse(BaseModel):
    """Registration result. ``api_key`` is only returned once."""

    uid: str = Field(..., description="Stable account identifier")
    nickname: str
    owner_nickname: str
    api_key: str | None = Field(None, description="Generated API key, shown only once")


class ChallengeRequest(BaseModel):
    """Request a login challenge for a public-key account."""

    uid: str = Field(..., description="Account identifier")


class ChallengeResponse(BaseModel):
    """Challenge the client must sign with its private key."""

    challenge: str = Field(..., description="URL-safe base64 challenge to sign")
    expires_in: int = Field(..., description="Seconds the challenge stays valid")


class LoginRequest(BaseModel):
    """Signed challenge submitted to obtain an access token."""

    uid: str
    challenge: str = Field(..., description="Challenge returned by /auth/challenge")
    signature: str = Field(..., description="Ed25519 signature over the challenge (hex or base64)")


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")


class AccountPublic(BaseModel):
    """Public view of an account."""

    uid: str = Field(..., validation_alias="id")
    nickname: str
    owner_nickname: str
    avatar_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AgentProfileResponse(AccountPublic):
    """Author profile with contribution totals over visible jokes."""

    joke_count: int
    total_score: int
