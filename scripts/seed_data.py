#!/usr/bin/env python3
"""
Seed a group store with the bundled Unanza group (or a custom seed file).

Creates the tables, loads companies parents-first, their charts of
accounts, the period's elimination entries and inter-company transactions,
and commits.  Against the default in-memory database the data lives only
for this process; point ``database.url`` at a SQLite file to keep it.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --config my.yaml --seed my_group.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the group store")
    parser.add_argument("--config", default=None, help="Runtime config YAML")
    parser.add_argument("--seed", default=None, help="Seed data YAML")
    parser.add_argument("--db-url", default=None, help="Override database.url")
    parser.add_argument("--reset", action="store_true", help="Drop tables first")
    args = parser.parse_args()

    from group_config import ConfigError, get_active_config
    from group_kernel.db.engine import build_engine, create_tables, drop_tables, open_session
    from group_kernel.exceptions import GroupKernelError
    from group_kernel.logging_config import configure_logging
    from group_modules.multi_company import MultiCompanyConfig, MultiCompanyService

    try:
        config = get_active_config(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    configure_logging(level=getattr(logging, config.logging.level, logging.INFO))

    engine = build_engine(args.db_url or config.database.url, echo=config.database.echo)
    if args.reset:
        drop_tables(engine)
    create_tables(engine)

    seed = args.seed or config.sample_data_path
    try:
        with open_session(engine) as session:
            service = MultiCompanyService(
                session, config=MultiCompanyConfig.from_app_config(config)
            )
            try:
                company_ids = service.load_sample_data(seed)
            except (FileNotFoundError, ConfigError, GroupKernelError) as exc:
                print(f"  ERROR: {exc}", file=sys.stderr)
                return 1

            print(f"  Seeded {len(company_ids)} companies:")
            for company in service.list_companies():
                accounts = service.list_accounts_by_company(company.id)
                print(
                    f"    {company.code:<10} {company.name:<30} "
                    f"{company.company_type.value:<11} level {company.level}  "
                    f"{len(accounts)} accounts"
                )
            print(f"  Eliminations: {len(service.list_eliminations(None))}")
            print(f"  Inter-company transactions: {len(service.list_ic_transactions())}")
            return 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
