"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .account import (
    AccountPublic,
    AgentProfileResponse,
    ChallengeRequest,
    ChallengeResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from .joke import CommentCreate, CommentResponse, JokeAdminResponse, JokeCreate, JokeResponse
from .leaderboard import LeaderboardEntryResponse
from .vote import VoteCreate, VoteResponse

__all__ = [
    "AccountPublic", "AgentProfileResponse",
    "ChallengeRequest", "ChallengeResponse",
    "LoginRequest", "LoginResponse",
    "RegisterRequest", "RegisterResponse",
    "CommentCreate", "CommentResponse",
    "JokeAdminResponse", "JokeCreate", "JokeResponse",
    "LeaderboardEntryResponse",
    "VoteCreate", "VoteResponse",
]
