"""
Configuration and seed-data schema.

Frozen dataclasses that YAML documents are parsed into by
``group_config.loader``.  Two kinds of document exist:

  AppConfig     = runtime settings (store URL, log level, report defaults)
  SampleDataSet = a group's companies, charts, eliminations and IC
                  transactions, cross-referenced by code instead of id
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """Where the store lives. The default is a private in-memory SQLite."""

    url: str = "sqlite://"
    echo: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ConsolidationConfig:
    """Defaults applied when a report request leaves them out."""

    default_scope: str = "full"
    default_period: str = "2024-12"


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    logging: LoggingConfig
    consolidation: ConsolidationConfig
    sample_data_path: Path | None = None
    checksum: str = ""


# ---------------------------------------------------------------------------
# Seed data (references by code, resolved to ids when loaded into a store)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompanySeed:
    name: str
    code: str
    company_type: str
    currency: str
    parent_code: str | None = None
    tax_id: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class AccountSeed:
    company_code: str
    account_code: str
    name: str
    account_type: str
    parent_code: str | None = None
    is_postable: bool = True
    balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class EliminationSeed:
    period: str
    debit_account: str
    credit_account: str
    amount: Decimal
    source_code: str
    target_code: str
    elimination_type: str
    description: str = ""


@dataclass(frozen=True)
class ICTransactionSeed:
    transaction_number: str
    transaction_type: str
    source_code: str
    target_code: str
    amount: Decimal
    transaction_date: date
    currency: str = "USD"
    status: str = "pending"
    description: str | None = None
    reference_number: str | None = None


@dataclass(frozen=True)
class SampleDataSet:
    """A complete group, ready to be loaded into an empty store."""

    name: str
    companies: tuple[CompanySeed, ...]
    accounts: tuple[AccountSeed, ...] = ()
    eliminations: tuple[EliminationSeed, ...] = ()
    ic_transactions: tuple[ICTransactionSeed, ...] = ()
    checksum: str = ""
