"""
Group engines - pure calculation functions over kernel DTOs.

- hierarchy: tree building, placement validation, level/root derivation
- consolidation: multi-company aggregation with eliminations
- intercompany: net balance between two companies
"""

from group_engines.consolidation import consolidate
from group_engines.hierarchy import (
    build_hierarchy,
    calculate_company_metadata,
    collect_descendant_ids,
    validate_company_hierarchy,
)
from group_engines.intercompany import intercompany_balance
from group_engines.tracer import traced_engine

__all__ = [
    "build_hierarchy",
    "calculate_company_metadata",
    "collect_descendant_ids",
    "consolidate",
    "intercompany_balance",
    "traced_engine",
    "validate_company_hierarchy",
]
