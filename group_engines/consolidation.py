"""
Module: group_engines.consolidation
Responsibility:
    Merge several companies' charts of accounts into one consolidated
    report and apply inter-company elimination entries.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import group_kernel domain DTOs, model enums and exceptions.

Invariants enforced:
    - consolidated_balance = sum of per-company balances, one entry per
      input company (0 where the company lacks the code).
    - elimination_amount = -(sum of matching elimination amounts); an entry
      naming the same code on both sides counts once.
    - net_balance = consolidated_balance + elimination_amount on every row.
    - Header rows roll up their descendant leaf rows.
    - Rows are sorted by account code; identical inputs give equal results.

Failure modes:
    - UnsupportedConsolidationScopeError for PROPORTIONAL and EQUITY.
    - InvalidFieldValueError for a scope string that names no method.
    - AccountDefinitionConflictError when one company has a code as a header
      and another has it as a postable account.
    - InvalidEliminationError for an elimination on a header account or
      with a non-positive amount.

Usage:
    from group_engines.consolidation import consolidate

    result = consolidate(
        {holding.id: holding_accounts, sub.id: sub_accounts},
        eliminations,
        period="2024-12",
    )
    result.account("1120").net_balance
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence
from uuid import UUID

from group_engines.tracer import traced_engine
from group_kernel.domain.dtos import (
    AccountInfo,
    ConsolidatedAccount,
    ConsolidationResult,
    ConsolidationScope,
    EliminationEntry,
)
from group_kernel.exceptions import (
    AccountDefinitionConflictError,
    InvalidEliminationError,
    InvalidFieldValueError,
    UnsupportedConsolidationScopeError,
)
from group_kernel.logging_config import get_logger
from group_kernel.models.account import AccountType

logger = get_logger("engines.consolidation")

ZERO = Decimal("0")


@dataclass(frozen=True)
class _CodeDefinition:
    """Shape of one account code, taken from the first company defining it."""

    account_code: str
    name: str
    account_type: AccountType
    level: int
    is_header: bool
    parent_code: str | None


def _coerce_scope(scope: ConsolidationScope | str) -> ConsolidationScope:
    try:
        return ConsolidationScope(scope)
    except ValueError:
        raise InvalidFieldValueError(
            "scope", scope, "must be one of full, proportional, equity"
        ) from None


def _collect_definitions(
    accounts_by_company: Mapping[UUID, Sequence[AccountInfo]],
) -> dict[str, _CodeDefinition]:
    definitions: dict[str, _CodeDefinition] = {}
    # Company that first declared each code as header / postable
    header_owner: dict[str, UUID] = {}
    postable_owner: dict[str, UUID] = {}
    for company_id, accounts in accounts_by_company.items():
        code_by_id = {a.id: a.account_code for a in accounts}
        for account in accounts:
            code = account.account_code
            owners = postable_owner if account.is_postable else header_owner
            owners.setdefault(code, company_id)
            if code in header_owner and code in postable_owner:
                raise AccountDefinitionConflictError(
                    code, str(header_owner[code]), str(postable_owner[code])
                )
            if code in definitions:
                continue
            definitions[code] = _CodeDefinition(
                account_code=code,
                name=account.name,
                account_type=AccountType(account.account_type),
                level=account.level,
                is_header=not account.is_postable,
                parent_code=code_by_id.get(account.parent_id) if account.parent_id else None,
            )
    return definitions


def _descendant_leaves(
    code: str,
    definitions: Mapping[str, _CodeDefinition],
    children: Mapping[str, list[str]],
) -> list[str]:
    leaves: list[str] = []
    seen = {code}
    stack = list(children.get(code, ()))
    while stack:
        child = stack.pop()
        if child in seen:
            continue
        seen.add(child)
        if definitions[child].is_header:
            stack.extend(children.get(child, ()))
        else:
            leaves.append(child)
    return leaves


@traced_engine(
    "consolidation",
    "1.0",
    fingerprint_fields=("accounts_by_company", "eliminations", "period", "scope"),
)
def consolidate(
    accounts_by_company: Mapping[UUID, Sequence[AccountInfo]],
    eliminations: Sequence[EliminationEntry],
    period: str = "",
    scope: ConsolidationScope | str = ConsolidationScope.FULL,
) -> ConsolidationResult:
    """
    Build a full consolidation of the given companies.

    Args:
        accounts_by_company: Each company's chart of accounts, keyed by
            company id.  Iteration order decides which company supplies a
            shared code's name, type and level.
        eliminations: Entries to apply; the caller has already filtered
            them to the period and group.
        period: Label copied onto the result.
        scope: Only ConsolidationScope.FULL is computed.

    Returns:
        ConsolidationResult with rows sorted by account code.
    """
    scope = _coerce_scope(scope)
    if scope != ConsolidationScope.FULL:
        raise UnsupportedConsolidationScopeError(scope.value)

    company_ids = tuple(accounts_by_company.keys())
    definitions = _collect_definitions(accounts_by_company)

    # Per-company stored balance for each code
    balances: dict[str, dict[UUID, Decimal]] = {
        code: {cid: ZERO for cid in company_ids} for code in definitions
    }
    for cid, accounts in accounts_by_company.items():
        for account in accounts:
            balances[account.account_code][cid] += Decimal(account.balance)

    eliminated: dict[str, Decimal] = {code: ZERO for code in definitions}
    unmatched: list[UUID] = []
    total_eliminations = ZERO
    for entry in eliminations:
        if entry.amount <= ZERO:
            raise InvalidEliminationError(str(entry.id), "amount must be positive")
        total_eliminations += entry.amount
        fully_matched = True
        for code in dict.fromkeys((entry.debit_account, entry.credit_account)):
            definition = definitions.get(code)
            if definition is None:
                fully_matched = False
                continue
            if definition.is_header:
                raise InvalidEliminationError(
                    str(entry.id), f"account {code} is a header account"
                )
            eliminated[code] -= entry.amount
        if not fully_matched:
            unmatched.append(entry.id)

    children: dict[str, list[str]] = {}
    for definition in definitions.values():
        if definition.parent_code is not None and definition.parent_code in definitions:
            children.setdefault(definition.parent_code, []).append(definition.account_code)

    rows: list[ConsolidatedAccount] = []
    for code in sorted(definitions):
        definition = definitions[code]
        if definition.is_header:
            leaves = _descendant_leaves(code, definitions, children)
            row_balances = {
                cid: sum((balances[leaf][cid] for leaf in leaves), ZERO)
                for cid in company_ids
            }
            elimination_amount = sum((eliminated[leaf] for leaf in leaves), ZERO)
        else:
            row_balances = balances[code]
            elimination_amount = eliminated[code]

        consolidated = sum(row_balances.values(), ZERO)
        rows.append(
            ConsolidatedAccount(
                account_code=code,
                account_name=definition.name,
                account_type=definition.account_type,
                level=definition.level,
                is_header=definition.is_header,
                balances=row_balances,
                consolidated_balance=consolidated,
                elimination_amount=elimination_amount,
                net_balance=consolidated + elimination_amount,
                parent_code=definition.parent_code,
            )
        )

    totals = {account_type: ZERO for account_type in AccountType}
    for row in rows:
        if not row.is_header:
            totals[row.account_type] += row.net_balance

    result = ConsolidationResult(
        period=period,
        scope=scope,
        company_ids=company_ids,
        accounts=tuple(rows),
        total_assets=totals[AccountType.ASSET],
        total_liabilities=totals[AccountType.LIABILITY],
        total_equity=totals[AccountType.EQUITY],
        total_revenue=totals[AccountType.REVENUE],
        total_expenses=totals[AccountType.EXPENSE],
        net_income=totals[AccountType.REVENUE] - totals[AccountType.EXPENSE],
        intercompany_eliminations=total_eliminations,
        unmatched_elimination_ids=tuple(unmatched),
    )

    if unmatched:
        logger.warning(
            "eliminations_unmatched",
            extra={
                "period": period,
                "elimination_ids": [str(eid) for eid in unmatched],
            },
        )

    logger.info(
        "consolidation_computed",
        extra={
            "period": period,
            "scope": scope.value,
            "company_count": len(company_ids),
            "account_count": len(rows),
            "elimination_count": len(eliminations),
            "intercompany_eliminations": str(total_eliminations),
        },
    )
    return result
