"""
Module: group_kernel.selectors.account_selector
Responsibility: Read access to the per-company chart of accounts, including
    the account tree with header roll-ups and totals by account type.

Header balances are never stored: a header's rolled_up_balance is the
recursive sum of its children.  Type totals are taken over postable
accounts only so headers are not counted twice.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import select

from group_kernel.domain.dtos import AccountInfo, AccountNode
from group_kernel.exceptions import AccountNotFoundError, CompanyNotFoundError
from group_kernel.models.account import Account, AccountType
from group_kernel.models.company import Company
from group_kernel.selectors.base import BaseSelector


class AccountSelector(BaseSelector[Account]):
    """Queries over the accounts table."""

    def get(self, account_id: UUID) -> AccountInfo:
        return AccountInfo.from_model(self._fetch(Account, account_id, AccountNotFoundError))

    def list_accounts_by_company(self, company_id: UUID) -> list[AccountInfo]:
        """
        A company's accounts ordered by account code.

        Raises:
            CompanyNotFoundError: No such company.
        """
        self._fetch(Company, company_id, CompanyNotFoundError)
        stmt = (
            select(Account)
            .where(Account.company_id == company_id)
            .order_by(Account.account_code)
        )
        return [AccountInfo.from_model(a) for a in self.session.execute(stmt).scalars()]

    def accounts_by_company(
        self,
        company_ids: Iterable[UUID],
    ) -> dict[UUID, list[AccountInfo]]:
        """Charts of several companies, keyed in the order given."""
        return {cid: self.list_accounts_by_company(cid) for cid in company_ids}

    def get_account_tree(self, company_id: UUID) -> tuple[AccountNode, ...]:
        """A company's chart as a forest with rolled-up header balances."""
        accounts = self.list_accounts_by_company(company_id)
        children: dict[UUID | None, list[AccountInfo]] = defaultdict(list)
        for account in accounts:
            children[account.parent_id].append(account)

        def _build(account: AccountInfo) -> AccountNode:
            kids = tuple(_build(child) for child in children.get(account.id, ()))
            if account.is_postable:
                balance = account.balance
            else:
                balance = sum((k.rolled_up_balance for k in kids), Decimal("0"))
            return AccountNode(account=account, children=kids, rolled_up_balance=balance)

        return tuple(_build(root) for root in children.get(None, ()))

    def get_type_totals(self, company_id: UUID) -> dict[AccountType, Decimal]:
        """Sum of postable balances per account type."""
        totals = {account_type: Decimal("0") for account_type in AccountType}
        for account in self.list_accounts_by_company(company_id):
            if account.is_postable:
                totals[account.account_type] += account.balance
        return totals
