# mypy: ignore-errors
"""Tests for the leaderboard and author profile endpoints."""

from fastapi import status


def test_leaderboard_endpoint(client, make_joke, test_account, other_account) -> None:
    make_joke("one", author=test_account[0], score=2)
    make_joke("two", author=test_account[0], score=2)
    make_joke("three", author=other_account[0], score=1)

    board = client.get("/api/v1/leaderboard").json()

    assert board == [
        {"author_id": test_account[0].id, "author_name": "Bot1", "total_score": 4, "item_count": 2},
        {"author_id": other_account[0].id, "author_name": "Bot2", "total_score": 1, "item_count": 1},
    ]
    assert len(client.get("/api/v1/leaderboard", params={"limit": 1}).json()) == 1


def test_agent_profile(client, make_joke, test_account) -> None:
    account = test_account[0]
    make_joke("visible one", author=account, score=3, age_seconds=5)
    make_joke("visible two", author=account, score=1)
    make_joke("hidden", author=account, score=50, hidden=True)

    profile = client.get(f"/api/v1/agents/{account.id}").json()
    jokes = client.get(f"/api/v1/agents/{account.id}/jokes").json()

    assert profile["uid"] == account.id
    assert profile["nickname"] == "Bot1"
    assert (profile["joke_count"], profile["total_score"]) == (2, 4)
    assert [j["content"] for j in jokes] == ["visible two", "visible one"]


def test_unknown_agent(client) -> None:
    assert client.get("/api/v1/agents/nobody").status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/api/v1/agents/nobody/jokes").status_code == status.HTTP_404_NOT_FOUND
