"""
DTOs -- immutable data transfer objects for the group store.

Responsibility:
    Defines the read-side structures that flow out of selectors and
    engines: CompanyInfo, AccountInfo, EliminationEntry,
    IntercompanyTransaction (row DTOs); HierarchyNode, AccountNode,
    CompanyContext (tree/context views); ConsolidatedAccount and
    ConsolidationResult (report output); plus CompanyInput, the write-side
    payload for company creation.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  from_model() class methods are
    boundary converters invoked only by selectors and services.

Invariants enforced:
    - Every DTO is a frozen dataclass; mapping fields are wrapped in
      MappingProxyType so a report cannot be mutated after it is built.
    - Engines accept and return DTOs, never ORM entities.

Rendering:
    ``to_dict()`` renders camelCase keys with Decimal -> str, UUID -> str,
    date/datetime -> ISO string and Enum -> value, ready for a JSON body.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterator, Mapping
from uuid import UUID

from group_kernel.exceptions import InvalidFieldValueError
from group_kernel.models.account import AccountType
from group_kernel.models.company import CompanyType
from group_kernel.models.elimination import EliminationType
from group_kernel.models.intercompany import ICTransactionStatus, ICTransactionType

if TYPE_CHECKING:
    from group_kernel.models.account import Account as AccountModel
    from group_kernel.models.company import Company as CompanyModel
    from group_kernel.models.elimination import EliminationEntryModel
    from group_kernel.models.intercompany import IntercompanyTransactionModel


class ConsolidationScope(str, Enum):
    """Consolidation methods. Only FULL is computed."""

    FULL = "full"
    PROPORTIONAL = "proportional"
    EQUITY = "equity"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def render_to_dict(obj: object) -> Any:
    """
    Convert a DTO to plain JSON-ready data.

    Dataclass field names become camelCase keys; mapping keys (company ids)
    are only stringified.
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple, frozenset)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, Mapping):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            _camel(f.name): render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    return obj


class _Renderable:
    def to_dict(self) -> dict[str, Any]:
        return render_to_dict(self)


# =============================================================================
# Row DTOs
# =============================================================================


@dataclass(frozen=True)
class CompanyInfo(_Renderable):
    """A company as seen by engines and callers."""

    id: UUID
    name: str
    code: str
    company_type: CompanyType
    parent_id: UUID | None
    root_id: UUID | None
    level: int
    currency: str
    tax_id: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: CompanyModel) -> CompanyInfo:
        return cls(
            id=model.id,
            name=model.name,
            code=model.code,
            company_type=CompanyType(model.company_type),
            parent_id=model.parent_id,
            root_id=model.root_id,
            level=model.level,
            currency=model.currency,
            tax_id=model.tax_id,
            address=model.address,
            city=model.city,
            country=model.country,
            phone=model.phone,
            email=model.email,
            website=model.website,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class CompanyInput:
    """
    Payload for creating a company.

    Fields are optional at construction so that missing required values are
    reported together by CompanyService as MissingRequiredFieldError.
    """

    name: str | None = None
    code: str | None = None
    company_type: str | None = None
    currency: str | None = None
    parent_id: UUID | None = None
    tax_id: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CompanyInput:
        """
        Build from a request body; accepts camelCase or snake_case keys.

        An empty ``parentId`` means no parent.

        Raises:
            InvalidFieldValueError: parentId is not a UUID.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        by_camel = {_camel(name): name for name in known}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = key if key in known else by_camel.get(key)
            if name is not None:
                kwargs[name] = value
        parent = kwargs.get("parent_id")
        if not parent:
            kwargs["parent_id"] = None
        elif not isinstance(parent, UUID):
            try:
                kwargs["parent_id"] = UUID(str(parent))
            except ValueError:
                raise InvalidFieldValueError("parent_id", parent, "must be a UUID") from None
        return cls(**kwargs)


@dataclass(frozen=True)
class AccountInfo(_Renderable):
    """One chart-of-accounts node of one company."""

    id: UUID
    company_id: UUID
    account_code: str
    name: str
    account_type: AccountType
    parent_id: UUID | None
    level: int
    is_postable: bool
    balance: Decimal = Decimal("0")
    is_active: bool = True

    @property
    def is_header(self) -> bool:
        return not self.is_postable

    @classmethod
    def from_model(cls, model: AccountModel) -> AccountInfo:
        return cls(
            id=model.id,
            company_id=model.company_id,
            account_code=model.account_code,
            name=model.name,
            account_type=AccountType(model.account_type),
            parent_id=model.parent_id,
            level=model.level,
            is_postable=model.is_postable,
            balance=Decimal(model.balance),
            is_active=model.is_active,
        )


@dataclass(frozen=True)
class EliminationEntry(_Renderable):
    """An inter-company elimination for one period."""

    id: UUID
    period: str
    description: str
    debit_account: str
    credit_account: str
    amount: Decimal
    source_company_id: UUID
    target_company_id: UUID
    elimination_type: EliminationType

    @classmethod
    def from_model(cls, model: EliminationEntryModel) -> EliminationEntry:
        return cls(
            id=model.id,
            period=model.period,
            description=model.description,
            debit_account=model.debit_account,
            credit_account=model.credit_account,
            amount=Decimal(model.amount),
            source_company_id=model.source_company_id,
            target_company_id=model.target_company_id,
            elimination_type=EliminationType(model.elimination_type),
        )


@dataclass(frozen=True)
class IntercompanyTransaction(_Renderable):
    """A transaction between two companies of the group."""

    id: UUID
    transaction_number: str
    transaction_type: ICTransactionType
    source_company_id: UUID
    target_company_id: UUID
    amount: Decimal
    currency: str
    status: ICTransactionStatus
    transaction_date: date
    description: str | None = None
    reference_number: str | None = None

    @classmethod
    def from_model(cls, model: IntercompanyTransactionModel) -> IntercompanyTransaction:
        return cls(
            id=model.id,
            transaction_number=model.transaction_number,
            transaction_type=ICTransactionType(model.transaction_type),
            source_company_id=model.source_company_id,
            target_company_id=model.target_company_id,
            amount=Decimal(model.amount),
            currency=model.currency,
            status=ICTransactionStatus(model.status),
            transaction_date=model.transaction_date,
            description=model.description,
            reference_number=model.reference_number,
        )


# =============================================================================
# Hierarchy views
# =============================================================================


@dataclass(frozen=True)
class CompanyMetadata:
    """Derived placement of a new company: root_id and level."""

    root_id: UUID | None
    level: int


@dataclass(frozen=True)
class HierarchyNode(_Renderable):
    """A company and its children, siblings already ordered."""

    company: CompanyInfo
    children: tuple[HierarchyNode, ...] = ()
    depth: int = 1

    def iter_nodes(self) -> Iterator[HierarchyNode]:
        """Pre-order walk of this subtree."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()


@dataclass(frozen=True)
class AccountNode(_Renderable):
    """
    A chart-of-accounts node with its display balance.

    For postable accounts ``rolled_up_balance`` equals the stored balance;
    for headers it is the recursive sum over children.
    """

    account: AccountInfo
    children: tuple[AccountNode, ...] = ()
    rolled_up_balance: Decimal = Decimal("0")

    def iter_nodes(self) -> Iterator[AccountNode]:
        yield self
        for child in self.children:
            yield from child.iter_nodes()


@dataclass(frozen=True)
class CompanyContext(_Renderable):
    """What a user acting as one company can see and do."""

    active_company: CompanyInfo
    company_level: int
    can_consolidate: bool
    parent_company: CompanyInfo | None
    child_companies: tuple[CompanyInfo, ...]
    accessible_company_ids: tuple[UUID, ...]


# =============================================================================
# Consolidation output
# =============================================================================


@dataclass(frozen=True)
class ConsolidatedAccount(_Renderable):
    """
    One row of a consolidated report.

    Guarantees:
        - consolidated_balance == sum(balances.values())
        - net_balance == consolidated_balance + elimination_amount
        - elimination_amount <= 0
    """

    account_code: str
    account_name: str
    account_type: AccountType
    level: int
    is_header: bool
    balances: Mapping[UUID, Decimal]
    consolidated_balance: Decimal
    elimination_amount: Decimal
    net_balance: Decimal
    parent_code: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.balances, MappingProxyType):
            object.__setattr__(self, "balances", MappingProxyType(dict(self.balances)))


@dataclass(frozen=True)
class ConsolidationResult(_Renderable):
    """A consolidated report with its summary figures."""

    period: str
    scope: ConsolidationScope
    company_ids: tuple[UUID, ...]
    accounts: tuple[ConsolidatedAccount, ...]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal
    intercompany_eliminations: Decimal
    unmatched_elimination_ids: tuple[UUID, ...] = ()
    generated_at: datetime | None = field(default=None, compare=False)

    def account(self, account_code: str) -> ConsolidatedAccount:
        """Look up a row by account code."""
        for row in self.accounts:
            if row.account_code == account_code:
                return row
        raise KeyError(account_code)
