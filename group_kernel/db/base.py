"""
ORM foundations shared by every group_kernel model.

* ``Base`` gives each table a uuid4 primary key and maps ``Decimal``
  annotations to an exact numeric column, so balances, elimination amounts
  and inter-company amounts never pass through float.
* ``TrackedBase`` adds who/when audit columns to companies, accounts,
  elimination entries and inter-company transactions.

Nothing here imports from models/, services/ or selectors/.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

# Precision for every monetary column
MONEY = Numeric(38, 9)


class UUIDString(TypeDecorator):
    """UUIDs stored as their 36-character text form; portable to SQLite."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        return None if value is None else str(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> UUID | None:
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    """Declarative base: uuid4 ``id`` plus the project-wide type map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: MONEY,
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
        int: Integer,
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base recording who created and last changed a row.

    ``created_at``/``updated_at`` are filled by the database;
    ``created_by_id`` is mandatory, ``updated_by_id`` is set by updates.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )
    created_by_id: Mapped[UUID] = mapped_column(UUIDString())
    updated_by_id: Mapped[UUID | None] = mapped_column(UUIDString())
