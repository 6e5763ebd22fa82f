"""
Service layer for chart-of-accounts operations.

Accounts belong to exactly one company.  Headers (non-postable) group
children and never hold a balance of their own; postable accounts carry the
balances that consolidation adds up.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from group_kernel.domain.dtos import AccountInfo
from group_kernel.exceptions import (
    AccountNotFoundError,
    DuplicateAccountCodeError,
    HasChildrenError,
    HeaderAccountBalanceError,
    InvalidFieldValueError,
    InvalidParentAccountError,
    MissingRequiredFieldError,
)
from group_kernel.logging_config import get_logger
from group_kernel.models.account import MAX_ACCOUNT_LEVEL, Account, AccountType
from group_kernel.services.base import BaseService, parse_amount

logger = get_logger("services.account")


class AccountService(BaseService[Account]):
    """Creates and maintains each company's chart of accounts."""

    def _code_taken(
        self,
        company_id: UUID,
        account_code: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        stmt = (
            select(func.count())
            .select_from(Account)
            .where(Account.company_id == company_id, Account.account_code == account_code)
        )
        if exclude_id is not None:
            stmt = stmt.where(Account.id != exclude_id)
        return self.session.execute(stmt).scalar_one() > 0

    def create_account(
        self,
        company_id: UUID,
        account_code: str,
        name: str,
        account_type: AccountType | str,
        actor_id: UUID,
        parent_id: UUID | None = None,
        is_postable: bool = True,
        balance: Decimal | int | str = Decimal("0"),
        is_active: bool = True,
    ) -> AccountInfo:
        """
        Add an account to a company's chart.

        Level is derived from the parent (1 without one).

        Raises:
            CompanyNotFoundError: No such company.
            MissingRequiredFieldError: Empty code or name.
            InvalidFieldValueError: Unknown account type or bad balance.
            DuplicateAccountCodeError: Code already in this company's chart.
            InvalidParentAccountError: Parent missing, in another company,
                postable, or already at the deepest level.
            HeaderAccountBalanceError: Non-zero balance on a header.
        """
        self._require_company(company_id)

        missing = [
            field for field, value in (("account_code", account_code), ("name", name))
            if not value
        ]
        if missing:
            raise MissingRequiredFieldError(missing)

        try:
            atype = AccountType(account_type)
        except ValueError:
            raise InvalidFieldValueError(
                "account_type", account_type, "unknown account type"
            ) from None

        amount = parse_amount("balance", balance)

        if self._code_taken(company_id, account_code):
            raise DuplicateAccountCodeError(str(company_id), account_code)

        level = 1
        if parent_id is not None:
            parent = self.session.get(Account, parent_id)
            if parent is None:
                raise InvalidParentAccountError(str(parent_id), "parent account not found")
            if parent.company_id != company_id:
                raise InvalidParentAccountError(
                    str(parent_id), "parent account belongs to another company"
                )
            if parent.is_postable:
                raise InvalidParentAccountError(
                    str(parent_id), "parent account is postable"
                )
            level = parent.level + 1
            if level > MAX_ACCOUNT_LEVEL:
                raise InvalidParentAccountError(
                    str(parent_id),
                    f"accounts cannot be nested deeper than level {MAX_ACCOUNT_LEVEL}",
                )

        if not is_postable and amount != 0:
            raise HeaderAccountBalanceError(account_code)

        account = Account(
            company_id=company_id,
            account_code=account_code,
            name=name,
            account_type=atype.value,
            parent_id=parent_id,
            level=level,
            is_postable=is_postable,
            balance=amount,
            is_active=is_active,
            created_by_id=actor_id,
        )
        self.session.add(account)
        self.session.flush()

        logger.info(
            "account_created",
            extra={
                "account_id": str(account.id),
                "company_id": str(company_id),
                "account_code": account_code,
                "is_postable": is_postable,
            },
        )
        return AccountInfo.from_model(account)

    def update_account(
        self,
        account_id: UUID,
        actor_id: UUID,
        account_code: str | None = None,
        name: str | None = None,
        is_active: bool | None = None,
    ) -> AccountInfo:
        """
        Rename, recode or (de)activate an account.

        Type, parent and postability are fixed once created.
        """
        account = self._require(Account, account_id, AccountNotFoundError)

        if account_code is not None and account_code != account.account_code:
            if self._code_taken(account.company_id, account_code, exclude_id=account.id):
                raise DuplicateAccountCodeError(str(account.company_id), account_code)
            account.account_code = account_code
        if name is not None:
            account.name = name
        if is_active is not None:
            account.is_active = is_active

        account.updated_by_id = actor_id
        self.session.flush()
        return AccountInfo.from_model(account)

    def set_balance(
        self,
        account_id: UUID,
        balance: Decimal | int | str,
        actor_id: UUID,
    ) -> AccountInfo:
        """
        Set the balance of a postable account.

        Raises:
            AccountNotFoundError: No such account.
            HeaderAccountBalanceError: The account is a header.
        """
        account = self._require(Account, account_id, AccountNotFoundError)
        if not account.is_postable:
            raise HeaderAccountBalanceError(account.account_code)

        account.balance = parse_amount("balance", balance)
        account.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "account_balance_set",
            extra={
                "account_id": str(account.id),
                "account_code": account.account_code,
                "balance": str(account.balance),
            },
        )
        return AccountInfo.from_model(account)

    def delete_account(self, account_id: UUID) -> None:
        """
        Delete an account with no child accounts.

        Raises:
            AccountNotFoundError: No such account.
            HasChildrenError: Other accounts name this one as parent.
        """
        account = self._require(Account, account_id, AccountNotFoundError)

        child_count = self.session.execute(
            select(func.count()).select_from(Account).where(Account.parent_id == account.id)
        ).scalar_one()
        if child_count:
            logger.warning(
                "account_delete_blocked",
                extra={"account_id": str(account.id), "child_count": child_count},
            )
            raise HasChildrenError("account", str(account.id), child_count)

        self.session.delete(account)
        self.session.flush()
        logger.info("account_deleted", extra={"account_id": str(account_id)})
