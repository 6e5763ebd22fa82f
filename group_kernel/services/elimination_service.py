"""
Service layer for inter-company elimination entries.

An entry is recorded per period and names the debit and credit account
codes it removes from the consolidated figures.  It is validated against the
companies' charts of accounts when it is recorded, and again by the
consolidation engine when it is applied.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from group_kernel.domain.dtos import EliminationEntry
from group_kernel.exceptions import (
    EliminationNotFoundError,
    InvalidEliminationError,
    InvalidFieldValueError,
    MissingRequiredFieldError,
)
from group_kernel.logging_config import get_logger
from group_kernel.models.account import Account
from group_kernel.models.elimination import EliminationEntryModel, EliminationType
from group_kernel.services.base import BaseService, parse_amount

logger = get_logger("services.elimination")


class EliminationService(BaseService[EliminationEntryModel]):
    """Records and removes elimination entries."""

    def create_elimination(
        self,
        period: str,
        debit_account: str,
        credit_account: str,
        amount: Decimal | int | str,
        source_company_id: UUID,
        target_company_id: UUID,
        elimination_type: EliminationType | str,
        actor_id: UUID,
        description: str = "",
    ) -> EliminationEntry:
        """
        Record an elimination entry.

        Raises:
            MissingRequiredFieldError: Empty period or account codes.
            InvalidFieldValueError: amount <= 0, unknown type, or source
                equal to target.
            CompanyNotFoundError: Source or target company missing.
            InvalidEliminationError: A named code is a header account in the
                source or target company.
        """
        missing = [
            field
            for field, value in (
                ("period", period),
                ("debit_account", debit_account),
                ("credit_account", credit_account),
            )
            if not value
        ]
        if missing:
            raise MissingRequiredFieldError(missing)

        value = parse_amount("amount", amount, positive=True)

        try:
            etype = EliminationType(elimination_type)
        except ValueError:
            raise InvalidFieldValueError(
                "elimination_type", elimination_type, "unknown elimination type"
            ) from None

        for company_id in (source_company_id, target_company_id):
            self._require_company(company_id)
        if source_company_id == target_company_id:
            raise InvalidFieldValueError(
                "target_company_id", target_company_id, "must differ from source company"
            )

        header_codes = self.session.execute(
            select(Account.account_code).where(
                Account.company_id.in_((source_company_id, target_company_id)),
                Account.account_code.in_((debit_account, credit_account)),
                Account.is_postable.is_(False),
            )
        ).scalars().all()
        if header_codes:
            raise InvalidEliminationError(
                "new", f"account {sorted(set(header_codes))[0]} is a header account"
            )

        entry = EliminationEntryModel(
            period=period,
            description=description,
            debit_account=debit_account,
            credit_account=credit_account,
            amount=value,
            source_company_id=source_company_id,
            target_company_id=target_company_id,
            elimination_type=etype.value,
            created_by_id=actor_id,
        )
        self.session.add(entry)
        self.session.flush()

        logger.info(
            "elimination_created",
            extra={
                "elimination_id": str(entry.id),
                "period": period,
                "elimination_type": etype.value,
                "amount": str(value),
            },
        )
        return EliminationEntry.from_model(entry)

    def delete_elimination(self, elimination_id: UUID) -> None:
        """Remove an elimination entry."""
        entry = self._require(EliminationEntryModel, elimination_id, EliminationNotFoundError)
        self.session.delete(entry)
        self.session.flush()
        logger.info("elimination_deleted", extra={"elimination_id": str(elimination_id)})
