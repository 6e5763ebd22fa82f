"""
Module: group_kernel.models.elimination
Responsibility: ORM persistence for inter-company elimination entries -- the
    adjustments that remove intra-group balances from consolidated figures.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (at the service layer, see EliminationService):
    - amount > 0.  It is applied as a downward adjustment at consolidation.
    - source and target companies exist and differ.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from group_kernel.db.base import TrackedBase, UUIDString


class EliminationType(str, Enum):
    """Classification of elimination entries."""

    RECEIVABLE_PAYABLE = "receivable_payable"
    INTERCOMPANY_BALANCE = "intercompany_balance"
    INVESTMENT_EQUITY = "investment_equity"
    INTERCOMPANY_SALES = "intercompany_sales"
    INTERCOMPANY_SERVICES = "intercompany_services"
    UNREALIZED_PROFIT = "unrealized_profit"


class EliminationEntryModel(TrackedBase):
    """An elimination entry for one reporting period."""

    __tablename__ = "elimination_entries"

    __table_args__ = (
        Index("idx_elimination_period", "period"),
    )

    period: Mapped[str] = mapped_column(String(20), nullable=False)

    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # Account codes, resolved against every company's chart at consolidation
    debit_account: Mapped[str] = mapped_column(String(20), nullable=False)
    credit_account: Mapped[str] = mapped_column(String(20), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

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

    elimination_type: Mapped[EliminationType] = mapped_column(
        String(30),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<EliminationEntry {self.period} {self.elimination_type} "
            f"Dr {self.debit_account} / Cr {self.credit_account} {self.amount}>"
        )
