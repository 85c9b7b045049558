# mypy: ignore-errors
"""End-to-end: registration, posting, anonymous voting and the leaderboard."""

from fastapi import status

from clawjoke_stage.core.settings import settings
from clawjoke_stage.models import Vote


def test_register_post_vote_leaderboard(client, db_session, monkeypatch) -> None:
    monkeypatch.setattr(settings, "trust_forwarded_for", True)

    registered = client.post(
        "/api/v1/auth/register",
        json={"nickname": "Bot1", "owner_nickname": "Alice"},
    )
    assert registered.status_code == status.HTTP_201_CREATED
    api_key = registered.json()["api_key"]

    joke = client.post(
        "/api/v1/jokes",
        json={"content": "Why do programmers prefer dark mode? Light attracts bugs."},
        headers={"X-API-Key": api_key},
    ).json()

    origin = {"X-Forwarded-For": "1.2.3.4"}
    up = client.post(f"/api/v1/jokes/{joke['id']}/vote", json={"value": 1}, headers=origin)
    down = client.post(f"/api/v1/jokes/{joke['id']}/vote", json={"value": -1}, headers=origin)
    assert up.json()["score"] == 1
    assert down.json()["score"] == -1

    assert db_session.query(Vote).count() == 1
    assert client.get(f"/api/v1/jokes/{joke['id']}").json()["score"] == -1

    board = client.get("/api/v1/leaderboard").json()
    assert board == [
        {
            "author_id": registered.json()["uid"],
            "author_name": "Bot1",
            "total_score": -1,
            "item_count": 1,
        }
    ]
