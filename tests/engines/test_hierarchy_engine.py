"""
Tests for the hierarchy engine.

Covers:
- Placement rules for holding, subsidiary and branch
- Level and root_id derivation
- Tree building, sibling order and orphan handling
- Descendant collection
"""

from uuid import UUID, uuid4

import pytest

from group_engines.hierarchy import (
    build_hierarchy,
    calculate_company_metadata,
    collect_descendant_ids,
    validate_company_hierarchy,
)
from group_kernel.domain.dtos import CompanyInfo
from group_kernel.exceptions import (
    DepthExceededError,
    HierarchyValidationError,
    ParentCompanyNotFoundError,
)
from group_kernel.models.company import CompanyType


def _company(
    name: str,
    code: str,
    company_type: CompanyType,
    parent: CompanyInfo | None = None,
    company_id: UUID | None = None,
) -> CompanyInfo:
    cid = company_id or uuid4()
    return CompanyInfo(
        id=cid,
        name=name,
        code=code,
        company_type=company_type,
        parent_id=parent.id if parent else None,
        root_id=parent.root_id if parent else cid,
        level=parent.level + 1 if parent else 1,
        currency="USD",
    )


@pytest.fixture
def companies():
    holding = _company("Holdings", "H", CompanyType.HOLDING)
    sub_b = _company("Bravo", "B", CompanyType.SUBSIDIARY, holding)
    sub_a = _company("Alpha", "A", CompanyType.SUBSIDIARY, holding)
    branch = _company("Alpha West", "AW", CompanyType.BRANCH, sub_a)
    return {"H": holding, "B": sub_b, "A": sub_a, "AW": branch}


class TestValidateCompanyHierarchy:
    """Placement rules."""

    def test_holding_without_parent_is_valid(self):
        validate_company_hierarchy(CompanyType.HOLDING, None, [])

    def test_holding_with_parent_rejected(self, companies):
        with pytest.raises(HierarchyValidationError) as exc_info:
            validate_company_hierarchy("holding", companies["H"].id, list(companies.values()))
        assert exc_info.value.message == "Holding companies cannot have a parent."

    @pytest.mark.parametrize("company_type", ["subsidiary", "branch"])
    def test_non_holding_requires_parent(self, company_type):
        with pytest.raises(HierarchyValidationError) as exc_info:
            validate_company_hierarchy(company_type, None, [])
        assert exc_info.value.message == "Subsidiary and Branch companies must have a parent"

    def test_unknown_parent_rejected(self, companies):
        with pytest.raises(ParentCompanyNotFoundError) as exc_info:
            validate_company_hierarchy("subsidiary", uuid4(), list(companies.values()))
        assert exc_info.value.message == "Parent company not found."

    def test_subsidiary_under_subsidiary_rejected(self, companies):
        with pytest.raises(HierarchyValidationError) as exc_info:
            validate_company_hierarchy("subsidiary", companies["A"].id, list(companies.values()))
        assert exc_info.value.message == "Subsidiaries must have a Holding company as parent."

    def test_branch_under_holding_rejected(self, companies):
        with pytest.raises(HierarchyValidationError) as exc_info:
            validate_company_hierarchy("branch", companies["H"].id, list(companies.values()))
        assert exc_info.value.message == "Branches must have a Subsidiary company as parent."

    def test_branch_under_branch_rejected(self, companies):
        with pytest.raises(HierarchyValidationError):
            validate_company_hierarchy("branch", companies["AW"].id, list(companies.values()))

    def test_valid_placements(self, companies):
        existing = list(companies.values())
        validate_company_hierarchy("subsidiary", companies["H"].id, existing)
        validate_company_hierarchy("branch", companies["A"].id, existing)

    def test_unknown_type_rejected(self):
        with pytest.raises(HierarchyValidationError) as exc_info:
            validate_company_hierarchy("division", None, [])
        assert exc_info.value.code == "HIERARCHY_VIOLATION"


class TestCalculateCompanyMetadata:
    """Level and root_id derivation."""

    def test_root_company(self):
        meta = calculate_company_metadata(None, [])
        assert meta.level == 1
        assert meta.root_id is None

    def test_child_inherits_root(self, companies):
        meta = calculate_company_metadata(companies["A"].id, list(companies.values()))
        assert meta.level == 3
        assert meta.root_id == companies["H"].id

    def test_depth_above_three_rejected(self, companies):
        with pytest.raises(DepthExceededError) as exc_info:
            calculate_company_metadata(companies["AW"].id, list(companies.values()))
        assert exc_info.value.level == 4
        assert exc_info.value.message == "Cannot create companies deeper than level 3"

    def test_missing_parent(self):
        with pytest.raises(ParentCompanyNotFoundError):
            calculate_company_metadata(uuid4(), [])


class TestBuildHierarchy:
    """Tree construction."""

    def test_empty(self):
        assert build_hierarchy([]) == ()

    def test_shape_and_sibling_order(self, companies):
        roots = build_hierarchy(list(companies.values()))

        assert len(roots) == 1
        root = roots[0]
        assert root.company.code == "H"
        assert root.depth == 1
        assert [c.company.name for c in root.children] == ["Alpha", "Bravo"]
        alpha = root.children[0]
        assert [c.company.code for c in alpha.children] == ["AW"]
        assert alpha.children[0].depth == 3

    def test_every_company_appears_once(self, companies):
        roots = build_hierarchy(list(companies.values()))
        seen = [node.company.id for root in roots for node in root.iter_nodes()]
        assert sorted(seen, key=str) == sorted((c.id for c in companies.values()), key=str)

    def test_input_order_does_not_matter(self, companies):
        forward = build_hierarchy(list(companies.values()))
        backward = build_hierarchy(list(reversed(list(companies.values()))))
        assert forward == backward

    def test_siblings_with_same_name_ordered_by_code(self):
        holding = _company("Holdings", "H", CompanyType.HOLDING)
        second = _company("Same", "Z", CompanyType.SUBSIDIARY, holding)
        first = _company("Same", "M", CompanyType.SUBSIDIARY, holding)
        roots = build_hierarchy([holding, second, first])
        assert [c.company.code for c in roots[0].children] == ["M", "Z"]

    def test_sibling_names_compare_ignoring_case(self):
        holding = _company("Holdings", "H", CompanyType.HOLDING)
        beta = _company("Beta Trading", "BT", CompanyType.SUBSIDIARY, holding)
        alpha = _company("alpha Trading", "AT", CompanyType.SUBSIDIARY, holding)
        roots = build_hierarchy([holding, beta, alpha])
        assert [c.company.name for c in roots[0].children] == ["alpha Trading", "Beta Trading"]

    def test_lowercase_name_precedes_uppercase_on_tie(self):
        holding = _company("Holdings", "H", CompanyType.HOLDING)
        upper = _company("Acme", "A1", CompanyType.SUBSIDIARY, holding)
        lower = _company("acme", "A2", CompanyType.SUBSIDIARY, holding)
        roots = build_hierarchy([holding, upper, lower])
        assert [c.company.name for c in roots[0].children] == ["acme", "Acme"]

    def test_accented_name_sorts_with_its_base_letter(self):
        holding = _company("Holdings", "H", CompanyType.HOLDING)
        names = ["Zeta", "Émile", "Echo"]
        subs = [
            _company(name, f"S{i}", CompanyType.SUBSIDIARY, holding)
            for i, name in enumerate(names)
        ]
        roots = build_hierarchy([holding, *subs])
        assert [c.company.name for c in roots[0].children] == ["Echo", "Émile", "Zeta"]

    def test_multiple_holdings_are_separate_roots(self):
        one = _company("Beta Group", "BG", CompanyType.HOLDING)
        two = _company("Alpha Group", "AG", CompanyType.HOLDING)
        roots = build_hierarchy([one, two])
        assert [r.company.code for r in roots] == ["AG", "BG"]

    def test_orphans_omitted_and_logged(self, companies, captured_logs):
        ghost_parent = _company("Ghost", "G", CompanyType.HOLDING)
        orphan = _company("Orphan", "O", CompanyType.SUBSIDIARY, ghost_parent)

        roots = build_hierarchy(list(companies.values()) + [orphan])

        placed = {node.company.id for root in roots for node in root.iter_nodes()}
        assert orphan.id not in placed
        assert len(placed) == 4

        warnings = [r for r in captured_logs() if r["message"] == "hierarchy_orphans_omitted"]
        assert len(warnings) == 1
        assert warnings[0]["orphan_ids"] == [str(orphan.id)]
        assert warnings[0]["orphan_count"] == 1

    def test_to_dict_renders_nested_children(self, companies):
        rendered = build_hierarchy(list(companies.values()))[0].to_dict()
        assert rendered["company"]["code"] == "H"
        assert rendered["company"]["companyType"] == "holding"
        assert rendered["children"][0]["children"][0]["company"]["code"] == "AW"


class TestCollectDescendantIds:
    """Descendant lookup used for access and consolidation scope."""

    def test_holding_sees_everything_below(self, companies):
        ids = collect_descendant_ids(list(companies.values()), companies["H"].id)
        assert set(ids) == {companies["A"].id, companies["B"].id, companies["AW"].id}
        assert companies["H"].id not in ids

    def test_breadth_first(self, companies):
        ids = collect_descendant_ids(list(companies.values()), companies["H"].id)
        assert ids[-1] == companies["AW"].id

    def test_leaf_has_none(self, companies):
        assert collect_descendant_ids(list(companies.values()), companies["AW"].id) == ()
