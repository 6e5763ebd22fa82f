"""
Configuration Loader (``group_config.loader``).

Responsibility
--------------
Loads YAML documents and parses them into the frozen dataclasses of
``group_config.schema``.  Runtime callers go through
``group_config.get_active_config()`` and ``group_config.load_sample_data()``;
this module is the parsing layer underneath them.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Missing required keys raise ``ConfigError`` naming the file and key; no
  silent defaults for required fields.
* Monetary values are parsed as ``Decimal`` from their string form.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing keys, wrong shapes, bad numbers or dates  -> ``ConfigError``.

Sample data layout
------------------
::

    name: unanza_group
    companies:
      - {code: HOLD, name: Unanza Holdings, company_type: holding, currency: USD}
      - {code: USA, name: Unanza USA, company_type: subsidiary, currency: USD,
         parent_code: HOLD}
    charts:
      - companies: [HOLD, USA]
        accounts:
          - {code: "1000", name: Assets, account_type: asset, is_postable: false}
          - {code: "1110", name: Cash, account_type: asset, parent_code: "1000",
             balances: {HOLD: 500000, USA: 350000}}
    eliminations:
      - {period: "2024-12", debit_account: "2110", credit_account: "1120",
         amount: 85000, source: USA, target: HOLD,
         elimination_type: receivable_payable}
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from group_config.schema import (
    AccountSeed,
    AppConfig,
    CompanySeed,
    ConsolidationConfig,
    DatabaseConfig,
    EliminationSeed,
    ICTransactionSeed,
    LoggingConfig,
    SampleDataSet,
)


class ConfigError(ValueError):
    """A configuration or seed document is structurally invalid."""

    code: str = "CONFIG_ERROR"

    def __init__(self, message: str, path: Path | str | None = None, key: str | None = None):
        self.path = str(path) if path is not None else None
        self.key = key
        location = f" ({self.path}" + (f": {key}" if key else "") + ")" if self.path else ""
        super().__init__(f"{message}{location}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError("top level must be a mapping", path=path)
    return data


def _require(data: dict[str, Any], key: str, path: Path | str | None) -> Any:
    if key not in data or data[key] is None or data[key] == "":
        raise ConfigError(f"missing required key '{key}'", path=path, key=key)
    return data[key]


def _as_list(data: dict[str, Any], key: str, path: Path | str | None) -> list[Any]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list", path=path, key=key)
    return value


def parse_decimal(value: Any, key: str, path: Path | str | None = None) -> Decimal:
    """Parse a monetary value from YAML via its string form."""
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ConfigError(f"'{key}' is not a number: {value!r}", path=path, key=key) from None
    if not amount.is_finite():
        raise ConfigError(f"'{key}' must be finite: {value!r}", path=path, key=key)
    return amount


def parse_date(value: Any, key: str, path: Path | str | None = None) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ConfigError(f"'{key}' is not an ISO date: {value!r}", path=path, key=key)


# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------


def parse_app_config(data: dict[str, Any], path: Path | None = None) -> AppConfig:
    """
    Parse an AppConfig.  Every section is optional.

    ``sample_data`` is resolved relative to the config file's directory.
    """
    database = data.get("database") or {}
    logging_section = data.get("logging") or {}
    consolidation = data.get("consolidation") or {}
    for key, section in (
        ("database", database),
        ("logging", logging_section),
        ("consolidation", consolidation),
    ):
        if not isinstance(section, dict):
            raise ConfigError(f"'{key}' must be a mapping", path=path, key=key)

    sample_data_path: Path | None = None
    if data.get("sample_data"):
        sample_data_path = Path(data["sample_data"])
        if not sample_data_path.is_absolute() and path is not None:
            sample_data_path = Path(path).parent / sample_data_path

    return AppConfig(
        database=DatabaseConfig(
            url=str(database.get("url", DatabaseConfig.url)),
            echo=bool(database.get("echo", DatabaseConfig.echo)),
        ),
        logging=LoggingConfig(
            level=str(logging_section.get("level", LoggingConfig.level)).upper(),
        ),
        consolidation=ConsolidationConfig(
            default_scope=str(consolidation.get("default_scope", ConsolidationConfig.default_scope)),
            default_period=str(consolidation.get("default_period", ConsolidationConfig.default_period)),
        ),
        sample_data_path=sample_data_path,
        checksum=compute_checksum(data),
    )


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


def parse_company(data: dict[str, Any], path: Path | str | None = None) -> CompanySeed:
    """Parse a CompanySeed from a dict."""
    return CompanySeed(
        name=str(_require(data, "name", path)),
        code=str(_require(data, "code", path)),
        company_type=str(_require(data, "company_type", path)),
        currency=str(_require(data, "currency", path)),
        parent_code=str(data["parent_code"]) if data.get("parent_code") else None,
        tax_id=data.get("tax_id"),
        address=data.get("address"),
        city=data.get("city"),
        country=data.get("country"),
        phone=data.get("phone"),
        email=data.get("email"),
        website=data.get("website"),
        is_active=bool(data.get("is_active", True)),
    )


def parse_chart(data: dict[str, Any], path: Path | str | None = None) -> list[AccountSeed]:
    """
    Expand a chart block into one AccountSeed per (company, account).

    Companies absent from an account's ``balances`` get a zero balance.
    """
    company_codes = [str(c) for c in _as_list(data, "companies", path)]
    if not company_codes:
        raise ConfigError("chart lists no companies", path=path, key="companies")

    seeds: list[AccountSeed] = []
    accounts = _as_list(data, "accounts", path)
    for company_code in company_codes:
        for account in accounts:
            balances = account.get("balances") or {}
            seeds.append(
                AccountSeed(
                    company_code=company_code,
                    account_code=str(_require(account, "code", path)),
                    name=str(_require(account, "name", path)),
                    account_type=str(_require(account, "account_type", path)),
                    parent_code=str(account["parent_code"]) if account.get("parent_code") else None,
                    is_postable=bool(account.get("is_postable", True)),
                    balance=parse_decimal(balances.get(company_code, 0), "balances", path),
                )
            )
    return seeds


def parse_elimination(data: dict[str, Any], path: Path | str | None = None) -> EliminationSeed:
    """Parse an EliminationSeed from a dict."""
    return EliminationSeed(
        period=str(_require(data, "period", path)),
        debit_account=str(_require(data, "debit_account", path)),
        credit_account=str(_require(data, "credit_account", path)),
        amount=parse_decimal(_require(data, "amount", path), "amount", path),
        source_code=str(_require(data, "source", path)),
        target_code=str(_require(data, "target", path)),
        elimination_type=str(_require(data, "elimination_type", path)),
        description=str(data.get("description", "")),
    )


def parse_ic_transaction(data: dict[str, Any], path: Path | str | None = None) -> ICTransactionSeed:
    """Parse an ICTransactionSeed from a dict."""
    return ICTransactionSeed(
        transaction_number=str(_require(data, "transaction_number", path)),
        transaction_type=str(_require(data, "transaction_type", path)),
        source_code=str(_require(data, "source", path)),
        target_code=str(_require(data, "target", path)),
        amount=parse_decimal(_require(data, "amount", path), "amount", path),
        transaction_date=parse_date(_require(data, "transaction_date", path), "transaction_date", path),
        currency=str(data.get("currency", "USD")),
        status=str(data.get("status", "pending")),
        description=data.get("description"),
        reference_number=data.get("reference_number"),
    )


def parse_sample_data(data: dict[str, Any], path: Path | str | None = None) -> SampleDataSet:
    """
    Parse a SampleDataSet and check its internal references.

    Raises:
        ConfigError: A parent, chart, elimination or transaction names a
            company code not declared under ``companies``, or an account
            comes before its parent account.
    """
    companies = tuple(parse_company(c, path) for c in _as_list(data, "companies", path))
    known = {c.code for c in companies}

    def _check(code: str | None, key: str) -> None:
        if code is not None and code not in known:
            raise ConfigError(f"unknown company code '{code}'", path=path, key=key)

    for company in companies:
        _check(company.parent_code, "parent_code")

    accounts: list[AccountSeed] = []
    declared: set[tuple[str, str]] = set()
    for chart in _as_list(data, "charts", path):
        for seed in parse_chart(chart, path):
            _check(seed.company_code, "charts.companies")
            if seed.parent_code is not None and (seed.company_code, seed.parent_code) not in declared:
                raise ConfigError(
                    f"account '{seed.account_code}' of {seed.company_code} is listed before "
                    f"its parent '{seed.parent_code}'",
                    path=path,
                    key="charts.accounts.parent_code",
                )
            declared.add((seed.company_code, seed.account_code))
            accounts.append(seed)

    eliminations = tuple(parse_elimination(e, path) for e in _as_list(data, "eliminations", path))
    ic_transactions = tuple(
        parse_ic_transaction(t, path) for t in _as_list(data, "ic_transactions", path)
    )
    for item in (*eliminations, *ic_transactions):
        _check(item.source_code, "source")
        _check(item.target_code, "target")

    return SampleDataSet(
        name=str(data.get("name", Path(path).stem if path else "sample")),
        companies=companies,
        accounts=tuple(accounts),
        eliminations=eliminations,
        ic_transactions=ic_transactions,
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
