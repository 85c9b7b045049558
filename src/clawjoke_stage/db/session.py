"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from clawjoke_stage.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import clawjoke_stage.models  # noqa: E402,F401

WRITE_LOCK_OPTION = "sqlite_write_lock"


def _install_sqlite_hooks(engine: Engine) -> None:
    """Enable foreign keys and WAL, and open write units with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, which lets two sessions both
    observe "no vote yet" before either inserts. Units started through
    :func:`begin_write` take the write lock up front so their read-then-write
    is serialized; plain reads stay deferred and, under WAL, never block or
    wait on a writer.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection: Any) -> None:
        if connection.get_execution_options().get(WRITE_LOCK_OPTION):
            connection.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            connection.exec_driver_sql("BEGIN")


def build_engine(url: str, **kwargs: Any) -> Engine:
    """Create an engine for ``url`` with the store's transactional guarantees."""
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", settings.sqlite_busy_timeout_seconds)
        kwargs["connect_args"] = connect_args
    else:
        kwargs.setdefault("pool_pre_ping", True)

    engine = create_engine(url, echo=settings.sql_debug, **kwargs)
    if is_sqlite:
        _install_sqlite_hooks(engine)
    return engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def begin_write(db: Session) -> None:
    """Start a transaction on ``db`` that holds the database write lock.

    Any open transaction is committed first. Call this before the first read
    of a unit that will write, and commit or roll back promptly.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options={WRITE_LOCK_OPTION: True})


@contextmanager
def write_unit(db: Session) -> Iterator[Session]:
    """Run a read-then-write unit under the write lock.

    Commits on success and rolls back on any error, so the lock is never held
    past the block.
    """
    begin_write(db)
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise


def create_tables(bind: Engine | None = None) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind: Engine | None = None) -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=bind or engine)
