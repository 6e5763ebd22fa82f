"""Pure domain types: clock and DTOs."""

from group_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from group_kernel.domain.dtos import (
    AccountInfo,
    AccountNode,
    CompanyContext,
    CompanyInfo,
    CompanyInput,
    CompanyMetadata,
    ConsolidatedAccount,
    ConsolidationResult,
    ConsolidationScope,
    EliminationEntry,
    HierarchyNode,
    IntercompanyTransaction,
    render_to_dict,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "AccountInfo",
    "AccountNode",
    "CompanyContext",
    "CompanyInfo",
    "CompanyInput",
    "CompanyMetadata",
    "ConsolidatedAccount",
    "ConsolidationResult",
    "ConsolidationScope",
    "EliminationEntry",
    "HierarchyNode",
    "IntercompanyTransaction",
    "render_to_dict",
]
