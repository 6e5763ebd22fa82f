"""
Module: group_kernel.selectors.company_selector
Responsibility: Read access to companies -- flat lists, the hierarchy tree
    and the per-company session context.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from group_engines.hierarchy import build_hierarchy, collect_descendant_ids, sibling_sort_key
from group_kernel.domain.dtos import CompanyContext, CompanyInfo, HierarchyNode
from group_kernel.exceptions import CompanyNotFoundError
from group_kernel.models.company import Company
from group_kernel.selectors.base import BaseSelector


class CompanySelector(BaseSelector[Company]):
    """Queries over the companies table."""

    def list_companies(self) -> list[CompanyInfo]:
        """All companies ordered by level, then name."""
        stmt = select(Company).order_by(Company.level, Company.name, Company.code)
        return [CompanyInfo.from_model(c) for c in self.session.execute(stmt).scalars()]

    def get(self, company_id: UUID) -> CompanyInfo:
        """
        Raises:
            CompanyNotFoundError: No such company.
        """
        return CompanyInfo.from_model(self._fetch(Company, company_id, CompanyNotFoundError))

    def find_by_code(self, code: str) -> CompanyInfo | None:
        stmt = select(Company).where(Company.code == code)
        company = self.session.execute(stmt).scalar_one_or_none()
        return CompanyInfo.from_model(company) if company else None

    def get_hierarchy(self) -> tuple[HierarchyNode, ...]:
        return build_hierarchy(self.list_companies())

    def list_descendant_ids(self, company_id: UUID) -> tuple[UUID, ...]:
        """Ids of every company below ``company_id``, excluding itself."""
        return collect_descendant_ids(self.list_companies(), company_id)

    def get_company_context(self, company_id: UUID) -> CompanyContext:
        """
        What a user working as ``company_id`` can see.

        Only a holding (level 1) can consolidate.  Accessible companies are
        the active company and all of its descendants.
        """
        companies = self.list_companies()
        by_id = {c.id: c for c in companies}
        active = by_id.get(company_id)
        if active is None:
            raise CompanyNotFoundError(str(company_id))

        children = sorted(
            (c for c in companies if c.parent_id == active.id),
            key=sibling_sort_key,
        )
        return CompanyContext(
            active_company=active,
            company_level=active.level,
            can_consolidate=active.level == 1,
            parent_company=by_id.get(active.parent_id) if active.parent_id else None,
            child_companies=tuple(children),
            accessible_company_ids=(active.id,) + collect_descendant_ids(companies, active.id),
        )
