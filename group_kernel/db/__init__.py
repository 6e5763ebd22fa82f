"""Database layer: declarative bases, engine and session helpers."""

from group_kernel.db.base import MONEY, Base, TrackedBase, UUIDString
from group_kernel.db.engine import (
    DEFAULT_DATABASE_URL,
    build_engine,
    create_tables,
    drop_tables,
    open_session,
)

__all__ = [
    "Base",
    "DEFAULT_DATABASE_URL",
    "MONEY",
    "TrackedBase",
    "UUIDString",
    "build_engine",
    "create_tables",
    "drop_tables",
    "open_session",
]
