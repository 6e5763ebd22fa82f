"""
Read side of the group store.

Selectors answer questions about companies, charts, eliminations and
inter-company transactions.  They run queries on the caller's session and
hand back frozen DTOs, so nothing a selector returns can be used to change
a row.  They never add, delete, flush or commit.
"""

from abc import ABC
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from group_kernel.db.base import Base
from group_kernel.exceptions import GroupKernelError

ModelType = TypeVar("ModelType", bound=Base)
RowType = TypeVar("RowType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    def __init__(self, session: Session):
        self.session = session

    def _fetch(self, model: type[RowType], row_id: UUID, not_found: type[GroupKernelError]) -> RowType:
        row = self.session.get(model, row_id)
        if row is None:
            raise not_found(str(row_id))
        return row
