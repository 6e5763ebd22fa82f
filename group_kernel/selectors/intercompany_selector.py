"""
Module: group_kernel.selectors.intercompany_selector
Responsibility: Read access to inter-company transactions.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_, select

from group_kernel.domain.dtos import IntercompanyTransaction
from group_kernel.exceptions import TransactionNotFoundError
from group_kernel.models.intercompany import ICTransactionStatus, IntercompanyTransactionModel
from group_kernel.selectors.base import BaseSelector


class IntercompanySelector(BaseSelector[IntercompanyTransactionModel]):
    """Queries over inter-company transactions."""

    def get(self, transaction_id: UUID) -> IntercompanyTransaction:
        txn = self._fetch(IntercompanyTransactionModel, transaction_id, TransactionNotFoundError)
        return IntercompanyTransaction.from_model(txn)

    def list_transactions(
        self,
        company_id: UUID | None = None,
        status: ICTransactionStatus | str | None = None,
    ) -> list[IntercompanyTransaction]:
        """
        Transactions ordered by date and number.

        Args:
            company_id: Only transactions where this company is source or target.
            status: Only transactions in this status.
        """
        model = IntercompanyTransactionModel
        stmt = select(model)
        if company_id is not None:
            stmt = stmt.where(
                or_(model.source_company_id == company_id, model.target_company_id == company_id)
            )
        if status is not None:
            stmt = stmt.where(model.status == ICTransactionStatus(status).value)
        stmt = stmt.order_by(model.transaction_date, model.transaction_number)
        return [IntercompanyTransaction.from_model(t) for t in self.session.execute(stmt).scalars()]
