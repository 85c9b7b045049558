# mypy: ignore-errors
"""Tests for SQLite transaction handling."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from clawjoke_stage.db.session import build_engine, create_tables, write_unit
from clawjoke_stage.models import Joke
from clawjoke_stage.services.content import ContentStore


@pytest.fixture()
def factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'locks.db'}", connect_args={"timeout": 0.2})
    create_tables(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


def test_open_read_does_not_block_writers(factory) -> None:
    with factory() as reader, factory() as writer:
        assert ContentStore(reader).list_items() == []
        assert reader.in_transaction()

        ContentStore(writer).create_item(None, "Written past an idle reader")

        assert len(ContentStore(writer).list_items()) == 1


def test_write_units_are_serialized(factory) -> None:
    with factory() as first, factory() as second:
        with write_unit(first):
            first.scalars(select(Joke)).all()
            with pytest.raises(OperationalError):
                with write_unit(second):
                    pass


def test_write_unit_rolls_back_on_error(factory) -> None:
    with factory() as session:
        with pytest.raises(RuntimeError):
            with write_unit(session):
                session.add(Joke(id="j-1", author_name="Anonymous", content="never stored"))
                raise RuntimeError("boom")

        assert not session.in_transaction()
        assert session.scalars(select(Joke)).all() == []
