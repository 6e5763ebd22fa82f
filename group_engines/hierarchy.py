"""
Module: group_engines.hierarchy
Responsibility:
    Build the company tree from a flat list of companies, validate where a
    new company may be placed, and derive its level and root_id.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import group_kernel domain DTOs, model enums and exceptions.

Invariants enforced:
    - Holding companies have no parent; subsidiaries sit under a holding;
      branches sit under a subsidiary.
    - level = parent.level + 1 (1 with no parent), never above 3.
    - root_id is copied from the parent, never re-derived.
    - Siblings are ordered by name (locale-style, so "alpha" precedes
      "Beta"), then code, then id.

Failure modes:
    - HierarchyValidationError / ParentCompanyNotFoundError from
      validate_company_hierarchy().
    - ParentCompanyNotFoundError / DepthExceededError from
      calculate_company_metadata().
    - build_hierarchy() never raises on bad data: companies whose parent is
      missing are left out and logged as ``hierarchy_orphans_omitted``.

Usage:
    from group_engines.hierarchy import build_hierarchy

    roots = build_hierarchy(companies)
    for node in roots[0].iter_nodes():
        print("  " * (node.depth - 1) + node.company.name)
"""

from __future__ import annotations

import unicodedata
from collections import defaultdict
from typing import Iterable, Sequence
from uuid import UUID

from group_engines.tracer import traced_engine
from group_kernel.domain.dtos import CompanyInfo, CompanyMetadata, HierarchyNode
from group_kernel.exceptions import (
    DepthExceededError,
    HierarchyValidationError,
    ParentCompanyNotFoundError,
)
from group_kernel.logging_config import get_logger
from group_kernel.models.company import MAX_COMPANY_LEVEL, CompanyType

logger = get_logger("engines.hierarchy")

# Company type a parent must have, per child type
_REQUIRED_PARENT_TYPE: dict[CompanyType, CompanyType] = {
    CompanyType.SUBSIDIARY: CompanyType.HOLDING,
    CompanyType.BRANCH: CompanyType.SUBSIDIARY,
}

_PARENT_TYPE_MESSAGES: dict[CompanyType, str] = {
    CompanyType.SUBSIDIARY: "Subsidiaries must have a Holding company as parent.",
    CompanyType.BRANCH: "Branches must have a Subsidiary company as parent.",
}


def _collation_key(text: str) -> tuple[str, str, str]:
    """
    Locale-style ordering: letters compare ignoring accents and case first,
    then accents, then case with lowercase ahead of uppercase.
    """
    decomposed = unicodedata.normalize("NFD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), text.swapcase())


def sibling_sort_key(company: CompanyInfo) -> tuple:
    """Display order of companies that share a parent."""
    return (_collation_key(company.name), company.code, str(company.id))


def _children_by_parent(
    companies: Iterable[CompanyInfo],
) -> dict[UUID | None, list[CompanyInfo]]:
    children: dict[UUID | None, list[CompanyInfo]] = defaultdict(list)
    for company in companies:
        children[company.parent_id].append(company)
    for siblings in children.values():
        siblings.sort(key=sibling_sort_key)
    return children


@traced_engine("hierarchy", "1.0", fingerprint_fields=("companies",))
def build_hierarchy(companies: Sequence[CompanyInfo]) -> tuple[HierarchyNode, ...]:
    """
    Arrange companies into a forest rooted at parentless companies.

    Every company reachable from a root appears exactly once, at
    depth == its distance from the root + 1.  Companies that are not
    reachable (missing parent) are omitted and their ids logged.
    """
    children = _children_by_parent(companies)
    placed: set[UUID] = set()

    def _build(company: CompanyInfo, depth: int) -> HierarchyNode:
        placed.add(company.id)
        return HierarchyNode(
            company=company,
            children=tuple(
                _build(child, depth + 1)
                for child in children.get(company.id, ())
                if child.id not in placed
            ),
            depth=depth,
        )

    roots = tuple(_build(root, 1) for root in children.get(None, ()))

    orphan_ids = sorted(str(c.id) for c in companies if c.id not in placed)
    if orphan_ids:
        logger.warning(
            "hierarchy_orphans_omitted",
            extra={"orphan_ids": orphan_ids, "orphan_count": len(orphan_ids)},
        )

    return roots


def collect_descendant_ids(
    companies: Iterable[CompanyInfo],
    company_id: UUID,
) -> tuple[UUID, ...]:
    """Ids of every company below ``company_id``, breadth-first, excluding itself."""
    children = _children_by_parent(companies)
    result: list[UUID] = []
    seen = {company_id}
    frontier = [company_id]
    while frontier:
        next_frontier: list[UUID] = []
        for parent_id in frontier:
            for child in children.get(parent_id, ()):
                if child.id in seen:
                    continue
                seen.add(child.id)
                result.append(child.id)
                next_frontier.append(child.id)
        frontier = next_frontier
    return tuple(result)


def _coerce_type(company_type: CompanyType | str) -> CompanyType:
    try:
        return CompanyType(company_type)
    except ValueError:
        raise HierarchyValidationError(
            f"Unknown company type: {company_type}.",
            company_type=str(company_type),
        ) from None


def _find(companies: Iterable[CompanyInfo], company_id: UUID) -> CompanyInfo | None:
    for company in companies:
        if company.id == company_id:
            return company
    return None


def validate_company_hierarchy(
    company_type: CompanyType | str,
    parent_id: UUID | None,
    existing_companies: Sequence[CompanyInfo],
) -> None:
    """
    Check that a company of ``company_type`` may sit under ``parent_id``.

    Raises:
        HierarchyValidationError: The placement breaks the holding ->
            subsidiary -> branch rules, or the type is unknown.
        ParentCompanyNotFoundError: parent_id names no existing company.
    """
    ctype = _coerce_type(company_type)

    if ctype == CompanyType.HOLDING:
        if parent_id is not None:
            raise HierarchyValidationError(
                "Holding companies cannot have a parent.",
                company_type=ctype.value,
                parent_id=str(parent_id),
            )
        return

    if parent_id is None:
        raise HierarchyValidationError(
            "Subsidiary and Branch companies must have a parent",
            company_type=ctype.value,
        )

    parent = _find(existing_companies, parent_id)
    if parent is None:
        raise ParentCompanyNotFoundError(str(parent_id), company_type=ctype.value)

    if parent.company_type != _REQUIRED_PARENT_TYPE[ctype]:
        raise HierarchyValidationError(
            _PARENT_TYPE_MESSAGES[ctype],
            company_type=ctype.value,
            parent_id=str(parent_id),
        )


def calculate_company_metadata(
    parent_id: UUID | None,
    existing_companies: Sequence[CompanyInfo],
) -> CompanyMetadata:
    """
    Derive level and root_id for a company placed under ``parent_id``.

    A parentless company gets level 1 and no root_id yet; the caller sets
    root_id to the company's own id once it has one.
    """
    if parent_id is None:
        return CompanyMetadata(root_id=None, level=1)

    parent = _find(existing_companies, parent_id)
    if parent is None:
        raise ParentCompanyNotFoundError(str(parent_id))

    level = parent.level + 1
    if level > MAX_COMPANY_LEVEL:
        raise DepthExceededError(level, MAX_COMPANY_LEVEL)

    return CompanyMetadata(root_id=parent.root_id, level=level)
