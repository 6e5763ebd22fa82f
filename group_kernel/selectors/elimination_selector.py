"""
Module: group_kernel.selectors.elimination_selector
Responsibility: Read access to elimination entries by period.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from group_kernel.domain.dtos import EliminationEntry
from group_kernel.exceptions import EliminationNotFoundError
from group_kernel.models.elimination import EliminationEntryModel
from group_kernel.selectors.base import BaseSelector


class EliminationSelector(BaseSelector[EliminationEntryModel]):
    """Queries over elimination entries."""

    def get(self, elimination_id: UUID) -> EliminationEntry:
        entry = self._fetch(EliminationEntryModel, elimination_id, EliminationNotFoundError)
        return EliminationEntry.from_model(entry)

    def list_eliminations(self, period: str | None = None) -> list[EliminationEntry]:
        """Entries for ``period`` (all periods when None), oldest first."""
        stmt = select(EliminationEntryModel)
        if period is not None:
            stmt = stmt.where(EliminationEntryModel.period == period)
        stmt = stmt.order_by(EliminationEntryModel.created_at, EliminationEntryModel.id)
        return [EliminationEntry.from_model(e) for e in self.session.execute(stmt).scalars()]
