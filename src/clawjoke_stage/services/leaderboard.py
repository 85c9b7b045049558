# src/clawjoke_stage/services/leaderboard.py
"""Leaderboard aggregation over visible jokes."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from clawjoke_stage.models import Joke

DEFAULT_LEADERBOARD_SIZE = 10


@dataclass(frozen=True)
class LeaderboardEntry:
    author_id: str | None
    author_name: str
    total_score: int
    item_count: int


def leaderboard(db: Session, limit: int = DEFAULT_LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
    """Rank authors by the summed score of their visible jokes.

    Jokes are grouped by author account; unattributed jokes group by their
    display name. Each entry shows the name snapshot of the author's most
    recent visible joke. Ties fall back to item count, then name.
    """
    author_key = func.coalesce(Joke.author_id, Joke.author_name)
    visible = (
        select(
            author_key.label("author_key"),
            Joke.author_id,
            Joke.author_name,
            Joke.score,
            func.row_number()
            .over(
                partition_by=author_key,
                order_by=(Joke.created_at.desc(), Joke.id.desc()),
            )
            .label("recency"),
        )
        .where(Joke.hidden.is_(False))
        .subquery()
    )

    latest_name = func.max(case((visible.c.recency == 1, visible.c.author_name)))
    total_score = func.sum(visible.c.score)
    item_count = func.count()
    stmt = (
        select(func.max(visible.c.author_id), latest_name, total_score, item_count)
        .group_by(visible.c.author_key)
        .order_by(total_score.desc(), item_count.desc(), latest_name)
        .limit(limit)
    )
    return [
        LeaderboardEntry(
            author_id=author_id,
            author_name=author_name,
            total_score=int(score or 0),
            item_count=int(count),
        )
        for author_id, author_name, score, count in db.execute(stmt).all()
    ]
