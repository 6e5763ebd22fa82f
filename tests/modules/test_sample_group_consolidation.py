"""
Consolidation of the bundled Unanza sample group.

The figures below are worked by hand from sets/sample_group.yaml and the
six 2024-12 elimination entries.
"""

import json
from decimal import Decimal

import pytest


@pytest.fixture
def report(multi_company, seeded_group):
    return multi_company.get_consolidated_report("2024-12", "full")


class TestSummaryFigures:

    def test_totals(self, report):
        assert report.total_assets == Decimal("8850000")
        assert report.total_liabilities == Decimal("605000")
        assert report.total_equity == Decimal("8045000")
        assert report.total_revenue == Decimal("8950000")
        assert report.total_expenses == Decimal("6525000")
        assert report.net_income == Decimal("2425000")

    def test_intercompany_eliminations(self, report):
        assert report.intercompany_eliminations == Decimal("4380000")
        assert report.unmatched_elimination_ids == ()

    def test_every_company_included(self, report, seeded_group):
        assert set(report.company_ids) == set(seeded_group.values())


class TestAccountRows:

    @pytest.mark.parametrize(
        "code, net",
        [
            ("1110", "1130000"),
            ("1120", "865000"),
            ("1130", "1355000"),
            ("1510", "5500000"),
            ("1520", "0"),
            ("2110", "605000"),
            ("2120", "0"),
            ("3100", "5000000"),
            ("3200", "3045000"),
            ("4100", "7380000"),
            ("4200", "1570000"),
            ("5100", "4255000"),
            ("5200", "2270000"),
        ],
    )
    def test_leaf_net_balances(self, report, code, net):
        assert report.account(code).net_balance == Decimal(net)

    def test_receivable_elimination(self, report):
        row = report.account("1120")
        assert row.consolidated_balance == Decimal("950000")
        assert row.elimination_amount == Decimal("-85000")

    def test_same_code_elimination_counted_once(self, report):
        row = report.account("2120")
        assert row.consolidated_balance == Decimal("250000")
        assert row.elimination_amount == Decimal("-250000")

    def test_header_rolls_up(self, report, seeded_group):
        assets = report.account("1000")
        assert assets.is_header
        assert assets.consolidated_balance == Decimal("12480000")
        assert assets.elimination_amount == Decimal("-3630000")
        assert assets.net_balance == Decimal("8850000")
        assert assets.balances[seeded_group["HOLD"]] == Decimal("6620000")

        current = report.account("1100")
        assert current.consolidated_balance == Decimal("3480000")
        assert current.elimination_amount == Decimal("-130000")
        assert current.net_balance == Decimal("3350000")

    def test_company_without_chart_shows_zero(self, report, seeded_group):
        assert report.account("1110").balances[seeded_group["USA-WEST"]] == Decimal("0")

    def test_row_invariants(self, report):
        for row in report.accounts:
            assert row.consolidated_balance == sum(row.balances.values(), Decimal("0"))
            assert row.net_balance == row.consolidated_balance + row.elimination_amount
            assert row.elimination_amount <= 0


def test_report_serializes(report, seeded_group):
    body = json.loads(json.dumps(report.to_dict()))
    assert body["period"] == "2024-12"
    assert body["scope"] == "full"
    assert Decimal(body["netIncome"]) == Decimal("2425000")
    assert Decimal(body["intercompanyEliminations"]) == Decimal("4380000")
    row = next(a for a in body["accounts"] if a["accountCode"] == "1120")
    assert Decimal(row["balances"][str(seeded_group["USA"])]) == Decimal("450000")


def test_repeat_report_is_identical(multi_company, seeded_group, report):
    assert multi_company.get_consolidated_report("2024-12", "full") == report
