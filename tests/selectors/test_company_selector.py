"""Tests for CompanySelector: lists, hierarchy and company context."""

from uuid import uuid4

import pytest

from group_kernel.domain.dtos import CompanyInput
from group_kernel.exceptions import CompanyNotFoundError


class TestListCompanies:

    def test_ordered_by_level_then_name(self, company_selector, group):
        codes = [c.code for c in company_selector.list_companies()]
        assert codes == ["HOLD", "ALPHA", "BETA", "ALPHA-BR"]

    def test_empty_store(self, company_selector):
        assert company_selector.list_companies() == []

    def test_get_and_find_by_code(self, company_selector, group):
        assert company_selector.get(group["BETA"].id).code == "BETA"
        assert company_selector.find_by_code("ALPHA").id == group["ALPHA"].id
        assert company_selector.find_by_code("NOPE") is None

    def test_get_unknown(self, company_selector):
        with pytest.raises(CompanyNotFoundError) as exc_info:
            company_selector.get(uuid4())
        assert exc_info.value.message == "Company not found"


class TestHierarchy:

    def test_single_tree(self, company_selector, group):
        roots = company_selector.get_hierarchy()
        assert len(roots) == 1
        assert [n.company.code for n in roots[0].iter_nodes()] == [
            "HOLD", "ALPHA", "ALPHA-BR", "BETA",
        ]

    def test_descendants(self, company_selector, group):
        ids = company_selector.list_descendant_ids(group["ALPHA"].id)
        assert ids == (group["ALPHA-BR"].id,)


class TestCompanyContext:

    def test_holding_context(self, company_selector, group):
        ctx = company_selector.get_company_context(group["HOLD"].id)

        assert ctx.active_company.code == "HOLD"
        assert ctx.company_level == 1
        assert ctx.can_consolidate is True
        assert ctx.parent_company is None
        assert [c.code for c in ctx.child_companies] == ["ALPHA", "BETA"]
        assert set(ctx.accessible_company_ids) == {c.id for c in group.values()}
        assert ctx.accessible_company_ids[0] == group["HOLD"].id

    def test_subsidiary_context(self, company_selector, group):
        ctx = company_selector.get_company_context(group["ALPHA"].id)

        assert ctx.can_consolidate is False
        assert ctx.parent_company.code == "HOLD"
        assert [c.code for c in ctx.child_companies] == ["ALPHA-BR"]
        assert ctx.accessible_company_ids == (group["ALPHA"].id, group["ALPHA-BR"].id)

    def test_child_companies_use_sibling_order(
        self, company_selector, company_service, group, test_actor_id
    ):
        company_service.create_company(
            CompanyInput(
                name="aardvark Sub", code="AARD", company_type="subsidiary",
                currency="USD", parent_id=group["HOLD"].id,
            ),
            test_actor_id,
        )
        ctx = company_selector.get_company_context(group["HOLD"].id)
        assert [c.code for c in ctx.child_companies] == ["AARD", "ALPHA", "BETA"]

    def test_branch_context(self, company_selector, group):
        ctx = company_selector.get_company_context(group["ALPHA-BR"].id)

        assert ctx.company_level == 3
        assert ctx.child_companies == ()
        assert ctx.accessible_company_ids == (group["ALPHA-BR"].id,)

    def test_unknown_company(self, company_selector):
        with pytest.raises(CompanyNotFoundError):
            company_selector.get_company_context(uuid4())
