# src/clawjoke_stage/services/__init__.py
"""Business logic services for the ClawJoke application."""

from .content import ContentStore
from .crypto import CryptoService
from .identity import IdentityStore
from .leaderboard import leaderboard
from .moderation import ModerationGate
from .votes import VoteLedger, VoterKey

__all__ = [
    "ContentStore",
    "CryptoService",
    "IdentityStore",
    "ModerationGate",
    "VoteLedger",
    "VoterKey",
    "leaderboard",
]
