#!/usr/bin/env python3
"""
Print the company hierarchy and the consolidated report.

Seeds the store first when it is empty, so against the default in-memory
database this is a self-contained demo of the Unanza group.

Usage:
    python3 scripts/view_consolidation.py
    python3 scripts/view_consolidation.py --period 2024-12 --root HOLD
    python3 scripts/view_consolidation.py --json
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 96


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def print_hierarchy(roots) -> None:
    print("=" * W)
    print("  COMPANY HIERARCHY".center(W))
    print("=" * W)
    for root in roots:
        for node in root.iter_nodes():
            company = node.company
            indent = "  " * node.depth
            print(
                f"{indent}{company.name} [{company.code}] "
                f"{company.company_type.value}, {company.currency}"
            )
    print()


def print_report(report, companies) -> None:
    codes = [companies[cid].code for cid in report.company_ids]
    print("=" * W)
    print(f"  CONSOLIDATED REPORT  {report.period}  ({report.scope.value})".center(W))
    print("=" * W)

    header = f"  {'Account':<28}" + "".join(f"{code:>12}" for code in codes)
    header += f"{'Total':>14}{'Elim.':>12}{'Net':>14}"
    print(header)
    print("-" * len(header))
    for row in report.accounts:
        label = ("  " * (row.level - 1)) + f"{row.account_code} {row.account_name}"
        line = f"  {label[:28]:<28}"
        line += "".join(f"{_money(row.balances[cid]):>12}" for cid in report.company_ids)
        line += (
            f"{_money(row.consolidated_balance):>14}"
            f"{_money(row.elimination_amount):>12}"
            f"{_money(row.net_balance):>14}"
        )
        print(line)
    print()

    print(f"  Total assets       {_money(report.total_assets):>18}")
    print(f"  Total liabilities  {_money(report.total_liabilities):>18}")
    print(f"  Total equity       {_money(report.total_equity):>18}")
    print(f"  Total revenue      {_money(report.total_revenue):>18}")
    print(f"  Total expenses     {_money(report.total_expenses):>18}")
    print(f"  Net income         {_money(report.net_income):>18}")
    print(f"  IC eliminations    {_money(report.intercompany_eliminations):>18}")
    if report.unmatched_elimination_ids:
        print(f"  Unmatched entries  {len(report.unmatched_elimination_ids):>18}")
    print()


def main() -> int:
    parser = argparse.ArgumentParser(description="Consolidated report viewer")
    parser.add_argument("--config", default=None, help="Runtime config YAML")
    parser.add_argument("--db-url", default=None, help="Override database.url")
    parser.add_argument("--period", default=None, help="Reporting period, e.g. 2024-12")
    parser.add_argument("--scope", default=None, help="full, proportional or equity")
    parser.add_argument("--root", default=None, help="Code of the holding to consolidate")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = parser.parse_args()

    from group_config import ConfigError, get_active_config
    from group_kernel.db.engine import build_engine, create_tables, open_session
    from group_kernel.exceptions import GroupKernelError
    from group_kernel.logging_config import configure_logging
    from group_kernel.selectors.company_selector import CompanySelector
    from group_modules.multi_company import MultiCompanyConfig, MultiCompanyService

    try:
        config = get_active_config(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    # Keep the console for the report
    configure_logging(level=logging.WARNING)

    engine = build_engine(args.db_url or config.database.url, echo=config.database.echo)
    create_tables(engine)
    try:
        with open_session(engine) as session:
            service = MultiCompanyService(
                session, config=MultiCompanyConfig.from_app_config(config)
            )
            if not service.list_companies():
                service.load_sample_data(config.sample_data_path)

            root_id = None
            if args.root is not None:
                root = CompanySelector(session).find_by_code(args.root)
                if root is None:
                    print(f"  ERROR: no company with code {args.root}", file=sys.stderr)
                    return 1
                root_id = root.id

            try:
                report = service.get_consolidated_report(args.period, args.scope, root_id)
            except GroupKernelError as exc:
                print(f"  ERROR: {exc.code}: {exc.message}", file=sys.stderr)
                return 1

            if args.json:
                print(json.dumps(report.to_dict(), indent=2))
                return 0

            companies = {c.id: c for c in service.list_companies()}
            print_hierarchy(service.get_hierarchy())
            print_report(report, companies)
            return 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
