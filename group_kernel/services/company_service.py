"""
Service layer for Company operations.

Creates, updates and deletes the companies of a group while keeping the
holding -> subsidiary -> branch hierarchy intact.

Order of checks on create:
    required fields -> field shape -> hierarchy placement -> code
    uniqueness -> derived level/root_id.  The first failing check raises.

Returns CompanyInfo DTOs instead of ORM entities.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import func, or_, select

from group_engines.hierarchy import calculate_company_metadata, validate_company_hierarchy
from group_kernel.domain.dtos import CompanyInfo, CompanyInput
from group_kernel.exceptions import (
    DuplicateCompanyCodeError,
    HasChildrenError,
    ImmutableCompanyFieldError,
    InvalidFieldValueError,
    MissingRequiredFieldError,
)
from group_kernel.logging_config import get_logger
from group_kernel.models.company import MAX_COMPANY_CODE_LENGTH, Company, CompanyType
from group_kernel.models.elimination import EliminationEntryModel
from group_kernel.models.intercompany import IntercompanyTransactionModel
from group_kernel.services.base import BaseService

logger = get_logger("services.company")

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

MUTABLE_COMPANY_FIELDS: frozenset[str] = frozenset({
    "name",
    "code",
    "currency",
    "tax_id",
    "address",
    "city",
    "country",
    "phone",
    "email",
    "website",
    "is_active",
})

STRUCTURAL_COMPANY_FIELDS: frozenset[str] = frozenset({
    "company_type",
    "parent_id",
    "level",
    "root_id",
})

_PATCH_ALIASES: dict[str, str] = {
    "companyType": "company_type",
    "parentId": "parent_id",
    "rootId": "root_id",
    "taxId": "tax_id",
    "isActive": "is_active",
}


def _validate_code(code: str) -> None:
    if not code or len(code) > MAX_COMPANY_CODE_LENGTH:
        raise InvalidFieldValueError(
            "code", code, f"must be 1-{MAX_COMPANY_CODE_LENGTH} characters"
        )


def _validate_currency(currency: str) -> None:
    if not _CURRENCY_RE.match(currency):
        raise InvalidFieldValueError("currency", currency, "must be 3 uppercase letters")


class CompanyService(BaseService[Company]):
    """
    Service for managing companies.

    Every mutation flushes; the caller commits.  Structural fields are
    written once, at creation.
    """

    def _all_companies(self) -> list[CompanyInfo]:
        rows = self.session.execute(select(Company)).scalars().all()
        return [CompanyInfo.from_model(c) for c in rows]

    def _code_taken(self, code: str, exclude_id: UUID | None = None) -> bool:
        stmt = select(func.count()).select_from(Company).where(Company.code == code)
        if exclude_id is not None:
            stmt = stmt.where(Company.id != exclude_id)
        return self.session.execute(stmt).scalar_one() > 0

    def find_by_idempotency_key(self, idempotency_key: str) -> CompanyInfo | None:
        """Return the company created under ``idempotency_key``, if any."""
        stmt = select(Company).where(Company.idempotency_key == idempotency_key)
        company = self.session.execute(stmt).scalar_one_or_none()
        return CompanyInfo.from_model(company) if company else None

    def create_company(
        self,
        data: CompanyInput,
        actor_id: UUID,
        idempotency_key: str | None = None,
    ) -> CompanyInfo:
        """
        Create a company after validating its fields and placement.

        Args:
            data: Company fields.
            actor_id: UUID of the user/actor creating the company.
            idempotency_key: When given and already used, the company created
                under it is returned and nothing is inserted.

        Returns:
            Created (or previously created) CompanyInfo.

        Raises:
            MissingRequiredFieldError: name, code, company_type or currency absent.
            InvalidFieldValueError: code too long or currency malformed.
            HierarchyValidationError: Placement breaks the hierarchy rules.
            DuplicateCompanyCodeError: Code already used.
            DepthExceededError: Parent already at level 3.
        """
        if idempotency_key is not None:
            existing = self.find_by_idempotency_key(idempotency_key)
            if existing is not None:
                logger.info(
                    "company_create_replayed",
                    extra={"company_id": str(existing.id), "idempotency_key": idempotency_key},
                )
                return existing

        missing = [
            name for name in ("name", "code", "company_type", "currency")
            if not getattr(data, name)
        ]
        if missing:
            raise MissingRequiredFieldError(missing)

        _validate_code(data.code)
        _validate_currency(data.currency)

        existing_companies = self._all_companies()
        validate_company_hierarchy(data.company_type, data.parent_id, existing_companies)

        if self._code_taken(data.code):
            raise DuplicateCompanyCodeError(data.code)

        metadata = calculate_company_metadata(data.parent_id, existing_companies)

        company = Company(
            name=data.name,
            code=data.code,
            company_type=CompanyType(data.company_type).value,
            parent_id=data.parent_id,
            root_id=metadata.root_id,
            level=metadata.level,
            currency=data.currency,
            tax_id=data.tax_id,
            address=data.address,
            city=data.city,
            country=data.country,
            phone=data.phone,
            email=data.email,
            website=data.website,
            is_active=data.is_active,
            idempotency_key=idempotency_key,
            created_by_id=actor_id,
        )
        self.session.add(company)
        self.session.flush()

        if company.root_id is None:
            company.root_id = company.id
            self.session.flush()

        logger.info(
            "company_created",
            extra={
                "company_id": str(company.id),
                "company_code": company.code,
                "company_type": company.company_type,
                "level": company.level,
                "root_id": str(company.root_id),
            },
        )
        return CompanyInfo.from_model(company)

    def update_company(
        self,
        company_id: UUID,
        patch: Mapping[str, Any],
        actor_id: UUID,
    ) -> CompanyInfo:
        """
        Apply a partial update to a company's mutable fields.

        Keys may be snake_case or camelCase.  A None value leaves the field
        unchanged.  Naming a structural field with a value different from
        the stored one is refused.

        Raises:
            CompanyNotFoundError: No such company.
            ImmutableCompanyFieldError: Patch changes company_type,
                parent_id, level or root_id.
            InvalidFieldValueError: Unknown field or malformed value.
            DuplicateCompanyCodeError: New code already used.
        """
        company = self._require_company(company_id)

        changes: dict[str, Any] = {}
        blocked: list[str] = []
        for key, value in patch.items():
            name = _PATCH_ALIASES.get(key, key)
            if value is None or name == "id":
                continue
            if name in STRUCTURAL_COMPANY_FIELDS:
                if isinstance(value, Enum):
                    value = value.value
                if str(value) != str(getattr(company, name)):
                    blocked.append(name)
                continue
            if name not in MUTABLE_COMPANY_FIELDS:
                raise InvalidFieldValueError(name, value, "unknown or read-only field")
            changes[name] = value

        if blocked:
            raise ImmutableCompanyFieldError(str(company_id), sorted(blocked))

        if "name" in changes and not changes["name"]:
            raise InvalidFieldValueError("name", changes["name"], "must not be empty")
        if "code" in changes and changes["code"] != company.code:
            _validate_code(changes["code"])
            if self._code_taken(changes["code"], exclude_id=company.id):
                raise DuplicateCompanyCodeError(changes["code"])
        if "currency" in changes:
            _validate_currency(changes["currency"])

        for name, value in changes.items():
            setattr(company, name, value)
        company.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "company_updated",
            extra={"company_id": str(company.id), "fields": sorted(changes)},
        )
        return CompanyInfo.from_model(company)

    def delete_company(self, company_id: UUID) -> None:
        """
        Delete a leaf company together with its chart of accounts.

        Raises:
            CompanyNotFoundError: No such company.
            HasChildrenError: Child companies, elimination entries or
                inter-company transactions still reference the company.
        """
        company = self._require_company(company_id)

        child_count = self.session.execute(
            select(func.count()).select_from(Company).where(Company.parent_id == company.id)
        ).scalar_one()
        if child_count:
            logger.warning(
                "company_delete_blocked",
                extra={"company_id": str(company.id), "child_count": child_count},
            )
            raise HasChildrenError("company", str(company.id), child_count)

        for model, dependent in (
            (EliminationEntryModel, "elimination entries"),
            (IntercompanyTransactionModel, "inter-company transactions"),
        ):
            count = self.session.execute(
                select(func.count()).select_from(model).where(
                    or_(
                        model.source_company_id == company.id,
                        model.target_company_id == company.id,
                    )
                )
            ).scalar_one()
            if count:
                logger.warning(
                    "company_delete_blocked",
                    extra={
                        "company_id": str(company.id),
                        "dependent": dependent,
                        "dependent_count": count,
                    },
                )
                raise HasChildrenError("company", str(company.id), count, dependent=dependent)

        account_count = len(company.accounts)
        self.session.delete(company)
        self.session.flush()

        logger.info(
            "company_deleted",
            extra={"company_id": str(company_id), "account_count": account_count},
        )
