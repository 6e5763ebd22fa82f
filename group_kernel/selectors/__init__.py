"""Read-only selectors returning DTOs."""

from group_kernel.selectors.account_selector import AccountSelector
from group_kernel.selectors.base import BaseSelector
from group_kernel.selectors.company_selector import CompanySelector
from group_kernel.selectors.elimination_selector import EliminationSelector
from group_kernel.selectors.intercompany_selector import IntercompanySelector

__all__ = [
    "AccountSelector",
    "BaseSelector",
    "CompanySelector",
    "EliminationSelector",
    "IntercompanySelector",
]
