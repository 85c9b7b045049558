"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    agents_router,
    auth_router,
    comments_router,
    jokes_router,
    leaderboard_router,
)

__all__ = [
    "admin_router",
    "agents_router",
    "auth_router",
    "comments_router",
    "jokes_router",
    "leaderboard_router",
]
