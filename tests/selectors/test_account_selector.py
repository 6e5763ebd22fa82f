"""Tests for AccountSelector: chart listing, tree roll-ups and type totals."""

from decimal import Decimal
from uuid import uuid4

import pytest

from group_kernel.exceptions import CompanyNotFoundError
from group_kernel.models.account import AccountType


@pytest.fixture
def alpha_chart(account_service, group, test_actor_id):
    company_id = group["ALPHA"].id
    assets = account_service.create_account(
        company_id, "1000", "Assets", "asset", test_actor_id, is_postable=False
    )
    current = account_service.create_account(
        company_id, "1100", "Current Assets", "asset", test_actor_id,
        parent_id=assets.id, is_postable=False,
    )
    account_service.create_account(
        company_id, "1120", "Receivables", "asset", test_actor_id,
        parent_id=current.id, balance="450000",
    )
    account_service.create_account(
        company_id, "1110", "Cash", "asset", test_actor_id,
        parent_id=current.id, balance="350000",
    )
    account_service.create_account(
        company_id, "1510", "Equipment", "asset", test_actor_id,
        parent_id=assets.id, balance="1800000",
    )
    account_service.create_account(
        company_id, "4100", "Sales", "revenue", test_actor_id, balance="4500000"
    )
    return company_id


class TestListAccounts:

    def test_ordered_by_code(self, account_selector, alpha_chart):
        codes = [a.account_code for a in account_selector.list_accounts_by_company(alpha_chart)]
        assert codes == ["1000", "1100", "1110", "1120", "1510", "4100"]

    def test_company_without_accounts(self, account_selector, group):
        assert account_selector.list_accounts_by_company(group["BETA"].id) == []

    def test_unknown_company(self, account_selector):
        with pytest.raises(CompanyNotFoundError):
            account_selector.list_accounts_by_company(uuid4())

    def test_accounts_by_company_keeps_order(self, account_selector, alpha_chart, group):
        charts = account_selector.accounts_by_company([group["BETA"].id, alpha_chart])
        assert list(charts) == [group["BETA"].id, alpha_chart]
        assert len(charts[alpha_chart]) == 6


class TestAccountTree:

    def test_header_balances_roll_up(self, account_selector, alpha_chart):
        roots = account_selector.get_account_tree(alpha_chart)

        assert [r.account.account_code for r in roots] == ["1000", "4100"]
        assets = roots[0]
        assert assets.rolled_up_balance == Decimal("2600000")
        current = assets.children[0]
        assert current.account.account_code == "1100"
        assert current.rolled_up_balance == Decimal("800000")
        assert [c.account.account_code for c in current.children] == ["1110", "1120"]

    def test_stored_header_balance_stays_zero(self, account_selector, alpha_chart):
        header = account_selector.list_accounts_by_company(alpha_chart)[0]
        assert header.is_header
        assert header.balance == Decimal("0")

    def test_iter_nodes_visits_every_account(self, account_selector, alpha_chart):
        roots = account_selector.get_account_tree(alpha_chart)
        assert sum(1 for r in roots for _ in r.iter_nodes()) == 6


class TestTypeTotals:

    def test_postable_only(self, account_selector, alpha_chart):
        totals = account_selector.get_type_totals(alpha_chart)
        assert totals[AccountType.ASSET] == Decimal("2600000")
        assert totals[AccountType.REVENUE] == Decimal("4500000")
        assert totals[AccountType.LIABILITY] == Decimal("0")
        assert set(totals) == set(AccountType)
