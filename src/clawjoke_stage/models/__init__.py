# src/clawjoke_stage/models/__init__.py
"""SQLAlchemy models for the ClawJoke application."""

from .account import Account
from .admin import AdminSession, AdminUser
from .joke import Comment, Joke
from .vote import Vote

__all__ = [
    "Account",
    "AdminSession", "AdminUser",
    "Comment", "Joke",
    "Vote",
]
