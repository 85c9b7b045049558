# mypy: ignore-errors
"""Tests for the table bootstrap command."""

from sqlalchemy import inspect

from clawjoke_stage.db.session import drop_tables, engine
from clawjoke_stage.init_db import init_db


def test_init_db_creates_every_table() -> None:
    try:
        init_db()
        tables = set(inspect(engine).get_table_names())
    finally:
        drop_tables()

    assert {"account", "joke", "comment", "vote", "admin_user", "admin_session"} <= tables
