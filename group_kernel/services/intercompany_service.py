"""
Service layer for inter-company transactions.

Records sales, purchases, services, dividends and loans between two
companies of the group and moves them through their approval lifecycle:

    pending --approve--> approved --complete--> completed
    pending | approved --cancel--> cancelled
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from group_kernel.domain.clock import Clock, SystemClock
from group_kernel.domain.dtos import IntercompanyTransaction
from group_kernel.exceptions import (
    InvalidFieldValueError,
    InvalidStatusTransitionError,
    TransactionNotFoundError,
)
from group_kernel.logging_config import get_logger
from group_kernel.models.intercompany import (
    VALID_IC_TRANSITIONS,
    ICTransactionStatus,
    ICTransactionType,
    IntercompanyTransactionModel,
)
from group_kernel.services.base import BaseService, parse_amount

logger = get_logger("services.intercompany")


class IntercompanyService(BaseService[IntercompanyTransactionModel]):
    """Creates inter-company transactions and applies status changes."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _next_transaction_number(self, transaction_date: date) -> str:
        count = self.session.execute(
            select(func.count()).select_from(IntercompanyTransactionModel)
        ).scalar_one()
        return f"IC-{transaction_date.year}-{count + 1:04d}"

    def create_transaction(
        self,
        transaction_type: ICTransactionType | str,
        source_company_id: UUID,
        target_company_id: UUID,
        amount: Decimal | int | str,
        actor_id: UUID,
        currency: str = "USD",
        transaction_date: date | None = None,
        description: str | None = None,
        reference_number: str | None = None,
        transaction_number: str | None = None,
    ) -> IntercompanyTransaction:
        """
        Record a pending inter-company transaction.

        The transaction date defaults to today on the injected clock; the
        number defaults to ``IC-<year>-<seq>``.

        Raises:
            InvalidFieldValueError: Unknown type, amount <= 0, or source
                equal to target.
            CompanyNotFoundError: Source or target company missing.
        """
        try:
            ttype = ICTransactionType(transaction_type)
        except ValueError:
            raise InvalidFieldValueError(
                "transaction_type", transaction_type, "unknown transaction type"
            ) from None

        value = parse_amount("amount", amount, positive=True)

        for company_id in (source_company_id, target_company_id):
            self._require_company(company_id)
        if source_company_id == target_company_id:
            raise InvalidFieldValueError(
                "target_company_id", target_company_id, "must differ from source company"
            )

        txn_date = transaction_date or self._clock.today()
        txn = IntercompanyTransactionModel(
            transaction_number=transaction_number or self._next_transaction_number(txn_date),
            transaction_type=ttype.value,
            source_company_id=source_company_id,
            target_company_id=target_company_id,
            amount=value,
            currency=currency,
            status=ICTransactionStatus.PENDING.value,
            transaction_date=txn_date,
            description=description,
            reference_number=reference_number,
            created_by_id=actor_id,
        )
        self.session.add(txn)
        self.session.flush()

        logger.info(
            "ic_transaction_created",
            extra={
                "transaction_id": str(txn.id),
                "transaction_number": txn.transaction_number,
                "transaction_type": ttype.value,
                "amount": str(value),
            },
        )
        return IntercompanyTransaction.from_model(txn)

    def _transition(
        self,
        transaction_id: UUID,
        to_status: ICTransactionStatus,
        actor_id: UUID,
    ) -> IntercompanyTransaction:
        txn = self._require(IntercompanyTransactionModel, transaction_id, TransactionNotFoundError)
        from_status = ICTransactionStatus(txn.status)
        if to_status not in VALID_IC_TRANSITIONS[from_status]:
            raise InvalidStatusTransitionError(
                str(transaction_id), from_status.value, to_status.value
            )

        txn.status = to_status.value
        txn.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "ic_transaction_status_changed",
            extra={
                "transaction_id": str(txn.id),
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
        return IntercompanyTransaction.from_model(txn)

    def approve(self, transaction_id: UUID, actor_id: UUID) -> IntercompanyTransaction:
        return self._transition(transaction_id, ICTransactionStatus.APPROVED, actor_id)

    def complete(self, transaction_id: UUID, actor_id: UUID) -> IntercompanyTransaction:
        return self._transition(transaction_id, ICTransactionStatus.COMPLETED, actor_id)

    def cancel(self, transaction_id: UUID, actor_id: UUID) -> IntercompanyTransaction:
        return self._transition(transaction_id, ICTransactionStatus.CANCELLED, actor_id)
