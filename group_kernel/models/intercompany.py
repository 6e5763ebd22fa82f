"""
Module: group_kernel.models.intercompany
Responsibility: ORM persistence for inter-company transactions between two
    companies of the group (sales, purchases, services, dividends, loans).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (at the service layer, see IntercompanyService):
    - Status moves pending -> approved -> completed, or pending|approved ->
      cancelled.  Completed and cancelled are terminal.
    - amount > 0; source and target differ.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from group_kernel.db.base import TrackedBase, UUIDString


class ICTransactionType(str, Enum):
    """Kinds of inter-company transaction."""

    SALE = "sale"
    PURCHASE = "purchase"
    SERVICE = "service"
    DIVIDEND = "dividend"
    LOAN = "loan"


class ICTransactionStatus(str, Enum):
    """Inter-company transaction lifecycle."""

    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


VALID_IC_TRANSITIONS: dict[ICTransactionStatus, frozenset[ICTransactionStatus]] = {
    ICTransactionStatus.PENDING: frozenset(
        {ICTransactionStatus.APPROVED, ICTransactionStatus.CANCELLED}
    ),
    ICTransactionStatus.APPROVED: frozenset(
        {ICTransactionStatus.COMPLETED, ICTransactionStatus.CANCELLED}
    ),
    ICTransactionStatus.COMPLETED: frozenset(),
    ICTransactionStatus.CANCELLED: frozenset(),
}


class IntercompanyTransactionModel(TrackedBase):
    """A transaction flowing from a source company to a target company."""

    __tablename__ = "intercompany_transactions"

    __table_args__ = (
        UniqueConstraint("transaction_number", name="uq_ic_transaction_number"),
        Index("idx_ic_source", "source_company_id"),
        Index("idx_ic_target", "target_company_id"),
    )

    transaction_number: Mapped[str] = mapped_column(String(50), nullable=False)

    transaction_type: Mapped[ICTransactionType] = mapped_column(
        String(20),
        nullable=False,
    )

    source_company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=False,
    )

    target_company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    status: Mapped[ICTransactionStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ICTransactionStatus.PENDING.value,
    )

    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    reference_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
