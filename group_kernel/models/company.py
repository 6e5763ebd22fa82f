"""
Module: group_kernel.models.company
Responsibility: ORM persistence for the companies of a group -- the nodes of
    the holding -> subsidiary -> branch hierarchy.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (at the service layer, see CompanyService):
    - level = parent.level + 1 when a parent exists, else 1.
    - root_id is the company's own id for a holding and the ancestor
      holding's id for every descendant.  It is copied from the parent at
      insert time and never re-derived.
    - company_type matches level (1=holding, 2=subsidiary, 3=branch).
    - company_type, parent_id, level and root_id are immutable after insert.

Failure modes:
    - IntegrityError on duplicate code (uq_company_code) or duplicate
      idempotency_key (uq_company_idempotency_key).
"""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from group_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from group_kernel.models.account import Account


class CompanyType(str, Enum):
    """The three fixed levels of the company hierarchy."""

    HOLDING = "holding"
    SUBSIDIARY = "subsidiary"
    BRANCH = "branch"

    @property
    def level(self) -> int:
        return COMPANY_LEVELS[self]


COMPANY_LEVELS: dict[CompanyType, int] = {
    CompanyType.HOLDING: 1,
    CompanyType.SUBSIDIARY: 2,
    CompanyType.BRANCH: 3,
}

MAX_COMPANY_LEVEL = 3
MAX_COMPANY_CODE_LENGTH = 10


class Company(TrackedBase):
    """
    A legal entity in the group.

    Contract:
        Company.code is unique across the whole store.  Structural fields
        (company_type, parent_id, level, root_id) are set once at creation.

    Non-goals:
        - Reparenting is not supported; no root_id cascade exists.
    """

    __tablename__ = "companies"

    __table_args__ = (
        UniqueConstraint("code", name="uq_company_code"),
        UniqueConstraint("idempotency_key", name="uq_company_idempotency_key"),
        Index("idx_company_parent", "parent_id"),
        Index("idx_company_root", "root_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    code: Mapped[str] = mapped_column(
        String(MAX_COMPANY_CODE_LENGTH),
        nullable=False,
    )

    company_type: Mapped[CompanyType] = mapped_column(
        String(20),
        nullable=False,
    )

    parent_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=True,
    )

    # Nullable only between INSERT and the flush that assigns a holding's own id
    root_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    tax_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    idempotency_key: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    accounts: Mapped[list["Account"]] = relationship(
        back_populates="company",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Company {self.code}: {self.name} ({self.company_type})>"
