"""
Engine construction and session helpers for the group store.

The default URL ``sqlite://`` is an in-memory database.  It is held on a
single StaticPool connection, so every session opened on one engine sees
the same companies and nothing outlives the process.  Any other SQLAlchemy
URL (a SQLite file, PostgreSQL ...) is passed through unchanged.

Callers own their engine; there is no module-level engine.  The
multi-company facade commits and rolls back, so sessions handed to it come
from ``open_session`` with ``expire_on_commit=False``: DTOs built after a
commit never trigger a lazy reload.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from group_kernel.db.base import Base
from group_kernel.logging_config import get_logger

logger = get_logger("db.engine")

DEFAULT_DATABASE_URL = "sqlite://"
_IN_MEMORY_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})


def _sqlite_foreign_keys_on(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """
    Create an engine for ``database_url``.

    SQLite engines enforce foreign keys on every connection, which is what
    keeps a parent company from disappearing under its subsidiaries.
    """
    options: dict = {"echo": echo}
    sqlite = database_url.startswith("sqlite")
    if sqlite:
        options["connect_args"] = {"check_same_thread": False}
        if database_url in _IN_MEMORY_URLS:
            options["poolclass"] = StaticPool

    engine = create_engine(database_url, **options)
    if sqlite:
        event.listen(engine, "connect", _sqlite_foreign_keys_on)

    logger.info(
        "engine_built",
        extra={
            "dialect": engine.dialect.name,
            "in_memory": database_url in _IN_MEMORY_URLS,
            "echo": echo,
        },
    )
    return engine


@contextmanager
def open_session(engine: Engine) -> Iterator[Session]:
    """
    Yield a session bound to ``engine`` and close it afterwards.

    Commits are left to the caller.  Anything still pending when the block
    exits is discarded by ``close()``.
    """
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


def _load_models() -> None:
    import group_kernel.models  # noqa: F401


def create_tables(engine: Engine) -> None:
    """Create the companies, accounts, eliminations and IC transaction tables."""
    _load_models()
    Base.metadata.create_all(engine)
    logger.debug("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables(engine: Engine) -> None:
    _load_models()
    Base.metadata.drop_all(engine)
    logger.debug("tables_dropped")
