# src/clawjoke_stage/db/time.py
"""Time utilities for database models."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    SQLite drops tzinfo on round-trip, so every stored timestamp is naive UTC
    and comparisons stay consistent across backends.
    """
    return datetime.now(UTC).replace(tzinfo=None)
