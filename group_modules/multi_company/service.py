"""
Multi-Company Module Service (``group_modules.multi_company.service``).

Responsibility
--------------
The public surface of the group store: company CRUD, hierarchy and
session-context reads, chart-of-accounts maintenance, elimination entries,
inter-company transactions and the consolidated report.  Each method maps
one-to-one onto an operation a JSON-over-HTTP layer would expose
(``listCompanies``, ``createCompany``, ``getConsolidatedReport`` ...).

Architecture position
---------------------
**Modules layer** -- thin glue.  ``MultiCompanyService`` composes the
kernel services (writes), selectors (reads) and the pure engines
(hierarchy, consolidation, inter-company balance).

Invariants enforced
-------------------
* Each public write owns the transaction boundary: ``commit`` on success,
  ``rollback`` and re-raise on any exception.  A failed action leaves the
  store exactly as it was.
* ``create_company`` with a ``request_id`` is idempotent: a replayed
  request returns the company created the first time.
* Reads go straight to the session; there is no cache, so a read after a
  write always sees the write.

Failure modes
-------------
* Every typed ``GroupKernelError`` propagates unchanged after rollback.
* ``get_consolidated_report`` raises ``ConsolidationRootError`` when the
  requested root is not a holding and
  ``UnsupportedConsolidationScopeError`` for proportional/equity scope.

Usage::

    service = MultiCompanyService(session, clock=clock)
    holding = service.create_company(
        {"name": "Unanza Holdings", "code": "HOLD",
         "companyType": "holding", "currency": "USD"},
        request_id="req-1",
    )
    report = service.get_consolidated_report("2024-12", "full")
"""

from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator, Mapping
from uuid import UUID

from sqlalchemy.orm import Session

from group_config import ConfigError
from group_config import load_sample_data as read_sample_data
from group_config.schema import SampleDataSet
from group_engines.consolidation import consolidate
from group_engines.intercompany import intercompany_balance
from group_kernel.domain.clock import Clock, SystemClock
from group_kernel.domain.dtos import (
    AccountInfo,
    AccountNode,
    CompanyContext,
    CompanyInfo,
    CompanyInput,
    ConsolidationResult,
    ConsolidationScope,
    EliminationEntry,
    HierarchyNode,
    IntercompanyTransaction,
)
from group_kernel.exceptions import ConsolidationRootError
from group_kernel.logging_config import LogContext, get_logger
from group_kernel.models.account import AccountType
from group_kernel.models.company import CompanyType
from group_kernel.models.elimination import EliminationType
from group_kernel.models.intercompany import ICTransactionStatus, ICTransactionType
from group_kernel.selectors.account_selector import AccountSelector
from group_kernel.selectors.company_selector import CompanySelector
from group_kernel.selectors.elimination_selector import EliminationSelector
from group_kernel.selectors.intercompany_selector import IntercompanySelector
from group_kernel.services.account_service import AccountService
from group_kernel.services.company_service import CompanyService
from group_kernel.services.elimination_service import EliminationService
from group_kernel.services.intercompany_service import IntercompanyService
from group_kernel.utils.idempotency import generate_idempotency_key
from group_modules.multi_company.config import MultiCompanyConfig

logger = get_logger("modules.multi_company")


class MultiCompanyService:
    """
    Facade over the group store.

    Contract
    --------
    * Write methods commit on success and roll back on any exception.
    * Read methods return frozen DTOs and never write.
    * ``actor_id`` defaults to the configured system actor.

    Non-goals
    ---------
    * Does NOT authenticate callers or filter by user permissions.
    * Does NOT post journal entries; balances are set directly.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: MultiCompanyConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or MultiCompanyConfig()

        self._companies = CompanyService(session)
        self._accounts = AccountService(session)
        self._eliminations = EliminationService(session)
        self._ic = IntercompanyService(session, self._clock)

        self._company_reader = CompanySelector(session)
        self._account_reader = AccountSelector(session)
        self._elimination_reader = EliminationSelector(session)
        self._ic_reader = IntercompanySelector(session)

    def _actor(self, actor_id: UUID | None) -> UUID:
        return actor_id or self._config.system_actor_id

    @contextmanager
    def _transaction(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
            self._session.commit()
        except Exception:
            self._session.rollback()
            logger.warning(
                "operation_rolled_back",
                extra={"operation": operation, **context},
                exc_info=True,
            )
            raise

    # =========================================================================
    # Companies
    # =========================================================================

    def list_companies(self) -> list[CompanyInfo]:
        return self._company_reader.list_companies()

    def get_company(self, company_id: UUID) -> CompanyInfo:
        return self._company_reader.get(company_id)

    def get_hierarchy(self) -> tuple[HierarchyNode, ...]:
        """The company forest, siblings sorted by name."""
        return self._company_reader.get_hierarchy()

    def get_company_context(self, company_id: UUID) -> CompanyContext:
        return self._company_reader.get_company_context(company_id)

    def create_company(
        self,
        data: CompanyInput | Mapping[str, Any],
        actor_id: UUID | None = None,
        request_id: str | None = None,
    ) -> CompanyInfo:
        """
        Create a company.

        Args:
            data: CompanyInput or a request body (camelCase or snake_case).
            actor_id: Creator; defaults to the system actor.
            request_id: Client-supplied id of the submitted action.  A
                repeated request_id returns the first result.

        Raises:
            ValidationError: Missing fields, hierarchy violation, duplicate
                code, or depth above 3.
        """
        payload = data if isinstance(data, CompanyInput) else CompanyInput.from_dict(data)
        key = None
        if request_id is not None:
            key = generate_idempotency_key(
                self._config.idempotency_producer, "company.create", request_id
            )

        with LogContext.bind(actor_id=str(self._actor(actor_id)), request_id=request_id):
            with self._transaction("create_company", company_code=payload.code):
                company = self._companies.create_company(
                    payload, self._actor(actor_id), idempotency_key=key
                )
        return company

    def update_company(
        self,
        company_id: UUID,
        patch: Mapping[str, Any],
        actor_id: UUID | None = None,
    ) -> CompanyInfo:
        """
        Update mutable company fields.

        Raises:
            CompanyNotFoundError, ImmutableCompanyFieldError,
            DuplicateCompanyCodeError, InvalidFieldValueError.
        """
        with LogContext.bind(actor_id=str(self._actor(actor_id)), company_id=str(company_id)):
            with self._transaction("update_company", target_id=str(company_id)):
                company = self._companies.update_company(company_id, patch, self._actor(actor_id))
        return company

    def delete_company(self, company_id: UUID) -> None:
        """
        Delete a company that has no children.

        Raises:
            CompanyNotFoundError, HasChildrenError.
        """
        with LogContext.bind(company_id=str(company_id)):
            with self._transaction("delete_company", target_id=str(company_id)):
                self._companies.delete_company(company_id)

    # =========================================================================
    # Chart of accounts
    # =========================================================================

    def list_accounts_by_company(self, company_id: UUID) -> list[AccountInfo]:
        return self._account_reader.list_accounts_by_company(company_id)

    def get_account_tree(self, company_id: UUID) -> tuple[AccountNode, ...]:
        return self._account_reader.get_account_tree(company_id)

    def get_account_type_totals(self, company_id: UUID) -> dict[AccountType, Decimal]:
        return self._account_reader.get_type_totals(company_id)

    def create_account(
        self,
        company_id: UUID,
        account_code: str,
        name: str,
        account_type: AccountType | str,
        parent_id: UUID | None = None,
        is_postable: bool = True,
        balance: Decimal | int | str = Decimal("0"),
        actor_id: UUID | None = None,
    ) -> AccountInfo:
        with self._transaction("create_account", account_code=account_code):
            account = self._accounts.create_account(
                company_id,
                account_code,
                name,
                account_type,
                self._actor(actor_id),
                parent_id=parent_id,
                is_postable=is_postable,
                balance=balance,
            )
        return account

    def update_account(
        self,
        account_id: UUID,
        account_code: str | None = None,
        name: str | None = None,
        is_active: bool | None = None,
        actor_id: UUID | None = None,
    ) -> AccountInfo:
        with self._transaction("update_account", account_id=str(account_id)):
            account = self._accounts.update_account(
                account_id,
                self._actor(actor_id),
                account_code=account_code,
                name=name,
                is_active=is_active,
            )
        return account

    def set_account_balance(
        self,
        account_id: UUID,
        balance: Decimal | int | str,
        actor_id: UUID | None = None,
    ) -> AccountInfo:
        with self._transaction("set_account_balance", account_id=str(account_id)):
            account = self._accounts.set_balance(account_id, balance, self._actor(actor_id))
        return account

    def delete_account(self, account_id: UUID) -> None:
        with self._transaction("delete_account", account_id=str(account_id)):
            self._accounts.delete_account(account_id)

    # =========================================================================
    # Eliminations
    # =========================================================================

    def list_eliminations(self, period: str | None = None) -> list[EliminationEntry]:
        return self._elimination_reader.list_eliminations(period)

    def create_elimination(
        self,
        period: str,
        debit_account: str,
        credit_account: str,
        amount: Decimal | int | str,
        source_company_id: UUID,
        target_company_id: UUID,
        elimination_type: EliminationType | str,
        description: str = "",
        actor_id: UUID | None = None,
    ) -> EliminationEntry:
        with LogContext.bind(period=period):
            with self._transaction("create_elimination", period=period):
                entry = self._eliminations.create_elimination(
                    period,
                    debit_account,
                    credit_account,
                    amount,
                    source_company_id,
                    target_company_id,
                    elimination_type,
                    self._actor(actor_id),
                    description=description,
                )
        return entry

    def delete_elimination(self, elimination_id: UUID) -> None:
        with self._transaction("delete_elimination", elimination_id=str(elimination_id)):
            self._eliminations.delete_elimination(elimination_id)

    # =========================================================================
    # Inter-company transactions
    # =========================================================================

    def list_ic_transactions(
        self,
        company_id: UUID | None = None,
        status: ICTransactionStatus | str | None = None,
    ) -> list[IntercompanyTransaction]:
        return self._ic_reader.list_transactions(company_id=company_id, status=status)

    def create_ic_transaction(
        self,
        transaction_type: ICTransactionType | str,
        source_company_id: UUID,
        target_company_id: UUID,
        amount: Decimal | int | str,
        currency: str = "USD",
        transaction_date: date | None = None,
        description: str | None = None,
        reference_number: str | None = None,
        transaction_number: str | None = None,
        actor_id: UUID | None = None,
    ) -> IntercompanyTransaction:
        with self._transaction("create_ic_transaction"):
            txn = self._ic.create_transaction(
                transaction_type,
                source_company_id,
                target_company_id,
                amount,
                self._actor(actor_id),
                currency=currency,
                transaction_date=transaction_date,
                description=description,
                reference_number=reference_number,
                transaction_number=transaction_number,
            )
        return txn

    def approve_ic_transaction(
        self, transaction_id: UUID, actor_id: UUID | None = None
    ) -> IntercompanyTransaction:
        with self._transaction("approve_ic_transaction", transaction_id=str(transaction_id)):
            txn = self._ic.approve(transaction_id, self._actor(actor_id))
        return txn

    def complete_ic_transaction(
        self, transaction_id: UUID, actor_id: UUID | None = None
    ) -> IntercompanyTransaction:
        with self._transaction("complete_ic_transaction", transaction_id=str(transaction_id)):
            txn = self._ic.complete(transaction_id, self._actor(actor_id))
        return txn

    def cancel_ic_transaction(
        self, transaction_id: UUID, actor_id: UUID | None = None
    ) -> IntercompanyTransaction:
        with self._transaction("cancel_ic_transaction", transaction_id=str(transaction_id)):
            txn = self._ic.cancel(transaction_id, self._actor(actor_id))
        return txn

    def get_ic_balance(self, entity_a: UUID, entity_b: UUID) -> Decimal:
        """Net inter-company amount from ``entity_a`` to ``entity_b``."""
        return intercompany_balance(entity_a, entity_b, self._ic_reader.list_transactions())

    # =========================================================================
    # Consolidation
    # =========================================================================

    def get_consolidated_report(
        self,
        period: str | None = None,
        scope: ConsolidationScope | str | None = None,
        root_company_id: UUID | None = None,
    ) -> ConsolidationResult:
        """
        Consolidate the group for ``period``.

        Without ``root_company_id`` every company and every elimination of
        the period is included.  With one, only that holding and its
        descendants are consolidated, and only eliminations whose source and
        target both belong to that group are applied.

        Raises:
            CompanyNotFoundError: root_company_id names no company.
            ConsolidationRootError: The root is not a holding.
            UnsupportedConsolidationScopeError: Scope other than full.
        """
        period = period or self._config.default_period
        scope = scope or self._config.default_scope

        with LogContext.bind(period=period):
            if root_company_id is not None:
                root = self._company_reader.get(root_company_id)
                if root.company_type != CompanyType.HOLDING:
                    logger.warning(
                        "consolidation_root_rejected",
                        extra={"root_id": str(root.id), "company_type": root.company_type.value},
                    )
                    raise ConsolidationRootError(str(root.id))
                company_ids = (root.id,) + self._company_reader.list_descendant_ids(root.id)
            else:
                company_ids = tuple(c.id for c in self._company_reader.list_companies())

            eliminations = self._elimination_reader.list_eliminations(period)
            if root_company_id is not None:
                group = set(company_ids)
                eliminations = [
                    e for e in eliminations
                    if e.source_company_id in group and e.target_company_id in group
                ]

            result = consolidate(
                self._account_reader.accounts_by_company(company_ids),
                eliminations,
                period=period,
                scope=scope,
            )
            result = dataclasses.replace(result, generated_at=self._clock.now())

            logger.info(
                "consolidation_completed",
                extra={
                    "root_id": str(root_company_id) if root_company_id else None,
                    "company_count": len(company_ids),
                    "elimination_count": len(eliminations),
                    "net_income": str(result.net_income),
                },
            )
        return result

    # =========================================================================
    # Seeding
    # =========================================================================

    def load_sample_data(
        self,
        seed: SampleDataSet | Path | str | None = None,
        actor_id: UUID | None = None,
    ) -> dict[str, UUID]:
        """
        Load a seed data set into the store in one transaction.

        Companies are created parents-first, charts headers-first, and
        inter-company transactions are walked through the status machine to
        their seeded status.

        Args:
            seed: A parsed SampleDataSet, a YAML path, or None for the
                bundled Unanza group.

        Returns:
            Mapping of company code to the id it was given.

        Raises:
            ConfigError: An account is listed before its parent account.
            GroupKernelError: Any seeded row fails validation; nothing is kept.
        """
        dataset = seed if isinstance(seed, SampleDataSet) else read_sample_data(seed)
        actor = self._actor(actor_id)
        company_ids: dict[str, UUID] = {}

        with self._transaction("load_sample_data", dataset=dataset.name):
            pending = list(dataset.companies)
            while pending:
                ready = [
                    c for c in pending
                    if c.parent_code is None or c.parent_code in company_ids
                ]
                if not ready:
                    # Remaining parents never resolve; let creation report it
                    ready = pending[:1]
                for seed_company in ready:
                    pending.remove(seed_company)
                    company = self._companies.create_company(
                        CompanyInput(
                            name=seed_company.name,
                            code=seed_company.code,
                            company_type=seed_company.company_type,
                            currency=seed_company.currency,
                            parent_id=company_ids.get(seed_company.parent_code)
                            if seed_company.parent_code else None,
                            tax_id=seed_company.tax_id,
                            address=seed_company.address,
                            city=seed_company.city,
                            country=seed_company.country,
                            phone=seed_company.phone,
                            email=seed_company.email,
                            website=seed_company.website,
                            is_active=seed_company.is_active,
                        ),
                        actor,
                    )
                    company_ids[company.code] = company.id

            account_ids: dict[tuple[str, str], UUID] = {}
            for seed_account in dataset.accounts:
                parent_id = None
                if seed_account.parent_code is not None:
                    parent_key = (seed_account.company_code, seed_account.parent_code)
                    if parent_key not in account_ids:
                        raise ConfigError(
                            f"account '{seed_account.account_code}' of "
                            f"{seed_account.company_code} is listed before its parent "
                            f"'{seed_account.parent_code}'",
                            key="charts.accounts.parent_code",
                        )
                    parent_id = account_ids[parent_key]
                account = self._accounts.create_account(
                    company_ids[seed_account.company_code],
                    seed_account.account_code,
                    seed_account.name,
                    seed_account.account_type,
                    actor,
                    parent_id=parent_id,
                    is_postable=seed_account.is_postable,
                    balance=seed_account.balance,
                )
                account_ids[(seed_account.company_code, seed_account.account_code)] = account.id

            for seed_entry in dataset.eliminations:
                self._eliminations.create_elimination(
                    seed_entry.period,
                    seed_entry.debit_account,
                    seed_entry.credit_account,
                    seed_entry.amount,
                    company_ids[seed_entry.source_code],
                    company_ids[seed_entry.target_code],
                    seed_entry.elimination_type,
                    actor,
                    description=seed_entry.description,
                )

            for seed_txn in dataset.ic_transactions:
                txn = self._ic.create_transaction(
                    seed_txn.transaction_type,
                    company_ids[seed_txn.source_code],
                    company_ids[seed_txn.target_code],
                    seed_txn.amount,
                    actor,
                    currency=seed_txn.currency,
                    transaction_date=seed_txn.transaction_date,
                    description=seed_txn.description,
                    reference_number=seed_txn.reference_number,
                    transaction_number=seed_txn.transaction_number,
                )
                target = ICTransactionStatus(seed_txn.status)
                if target in (ICTransactionStatus.APPROVED, ICTransactionStatus.COMPLETED):
                    self._ic.approve(txn.id, actor)
                if target == ICTransactionStatus.COMPLETED:
                    self._ic.complete(txn.id, actor)
                if target == ICTransactionStatus.CANCELLED:
                    self._ic.cancel(txn.id, actor)

        logger.info(
            "sample_data_loaded",
            extra={
                "dataset": dataset.name,
                "company_count": len(company_ids),
                "account_count": len(dataset.accounts),
                "elimination_count": len(dataset.eliminations),
                "ic_transaction_count": len(dataset.ic_transactions),
            },
        )
        return company_ids
