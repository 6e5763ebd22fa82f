"""
Shared plumbing for the kernel write services.

Services add, change and delete rows and ``flush()`` so constraint
violations surface at the call site.  They never commit or roll back: the
multi-company facade (or a test) owns the transaction, which is how a
failed seed load or a rejected create leaves the store unchanged.
"""

from abc import ABC
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from group_kernel.db.base import Base
from group_kernel.exceptions import (
    CompanyNotFoundError,
    GroupKernelError,
    InvalidFieldValueError,
)
from group_kernel.models.company import Company

ModelType = TypeVar("ModelType", bound=Base)
RowType = TypeVar("RowType", bound=Base)


def parse_amount(field: str, value: Any, *, positive: bool = False) -> Decimal:
    """
    Read a money value given as Decimal, int or numeric string.

    NaN and infinities are rejected along with anything unparseable; with
    ``positive`` the value must also be greater than zero.

    Raises:
        InvalidFieldValueError: Value is not a finite decimal (or not positive).
    """
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise InvalidFieldValueError(field, value, "must be a decimal number") from None
    if not amount.is_finite():
        raise InvalidFieldValueError(field, value, "must be a finite decimal number")
    if positive and amount <= 0:
        raise InvalidFieldValueError(field, value, "must be greater than zero")
    return amount


class BaseService(ABC, Generic[ModelType]):
    """Holds the caller's session; subclasses flush, never commit."""

    def __init__(self, session: Session):
        self.session = session

    def _require(
        self,
        model: type[RowType],
        row_id: UUID,
        not_found: type[GroupKernelError],
    ) -> RowType:
        """Load ``model`` by primary key or raise ``not_found(row_id)``."""
        row = self.session.get(model, row_id)
        if row is None:
            raise not_found(str(row_id))
        return row

    def _require_company(self, company_id: UUID) -> Company:
        return self._require(Company, company_id, CompanyNotFoundError)
