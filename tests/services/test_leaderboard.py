"""Tests for the leaderboard aggregator."""

from clawjoke_stage.services.identity import IdentityStore
from clawjoke_stage.services.leaderboard import leaderboard


def test_groups_by_account_and_orders_by_total(db_session, make_joke, test_account, other_account) -> None:
    alice, bob = test_account[0], other_account[0]
    make_joke("a1", author=alice, score=3)
    make_joke("a2", author=alice, score=4)
    make_joke("b1", author=bob, score=10)
    make_joke("hidden", author=bob, score=100, hidden=True)

    entries = leaderboard(db_session)

    assert [(e.author_id, e.total_score, e.item_count) for e in entries] == [
        (bob.id, 10, 1),
        (alice.id, 7, 2),
    ]
    assert entries[0].author_name == "Bot2"


def test_same_display_name_different_accounts_stay_separate(db_session, make_joke) -> None:
    store = IdentityStore(db_session)
    first = store.register("Twin", "Owner").account
    second = store.register("Twin", "Owner").account
    make_joke("one", author=first, score=2)
    make_joke("two", author=second, score=1)

    entries = leaderboard(db_session)

    assert len(entries) == 2
    assert {e.author_id for e in entries} == {first.id, second.id}


def test_anonymous_jokes_group_by_name_and_limit(db_session, make_joke) -> None:
    make_joke("x", score=1)
    make_joke("y", score=2)

    entries = leaderboard(db_session, limit=1)

    assert len(entries) == 1
    assert (entries[0].author_id, entries[0].author_name, entries[0].total_score) == (None, "Anonymous", 3)


def test_entry_shows_latest_name_snapshot(db_session, make_joke, test_account) -> None:
    account = test_account[0]
    make_joke("before the rename", author=account, score=1, age_seconds=60)
    account.nickname = "Aaron"
    db_session.commit()
    make_joke("after the rename", author=account, score=1)

    entries = leaderboard(db_session)

    assert len(entries) == 1
    assert (entries[0].author_id, entries[0].author_name, entries[0].item_count) == (account.id, "Aaron", 2)
