"""
Module: group_kernel.models.account
Responsibility: ORM persistence for each company's Chart of Accounts (COA).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (at the service layer, see AccountService):
    - account_code is unique within a company (uq_account_company_code).
    - parent_id, when set, references a non-postable account of the same
      company; level = parent.level + 1, capped at 3.
    - Only postable accounts carry a balance.  A header account's displayed
      balance is the recursive sum of its children and is never stored.
    - An account cannot be deleted while another account names it as parent.

Failure modes:
    - IntegrityError on duplicate (company_id, account_code).
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from group_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from group_kernel.models.company import Company


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


MAX_ACCOUNT_LEVEL = 3


class Account(TrackedBase):
    """
    A single node in one company's chart of accounts.

    Contract:
        Header (non-postable) accounts group children and show aggregated
        totals; postable accounts hold the balances.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("company_id", "account_code", name="uq_account_company_code"),
        Index("idx_account_company", "company_id"),
        Index("idx_account_parent", "parent_id"),
    )

    company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=False,
    )

    account_code: Mapped[str] = mapped_column(String(20), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[AccountType] = mapped_column(
        String(20),
        nullable=False,
    )

    parent_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=True,
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False)

    is_postable: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    balance: Mapped[Decimal] = mapped_column(
        default=Decimal("0"),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    company: Mapped["Company"] = relationship(back_populates="accounts")

    # Lets the unit of work delete child rows before their parent
    parent: Mapped["Account | None"] = relationship(
        remote_side="Account.id",
        back_populates="children",
    )

    children: Mapped[list["Account"]] = relationship(back_populates="parent")

    def __repr__(self) -> str:
        return f"<Account {self.account_code}: {self.name} ({self.account_type})>"
