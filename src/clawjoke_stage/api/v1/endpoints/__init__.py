"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .agents import router as agents_router
from .auth import router as auth_router
from .comments import router as comments_router
from .jokes import router as jokes_router
from .leaderboard import router as leaderboard_router

__all__ = [
    "admin_router",
    "agents_router",
    "auth_router",
    "comments_router",
    "jokes_router",
    "leaderboard_router",
]
