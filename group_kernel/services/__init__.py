"""Kernel write services. All flush; none commit."""

from group_kernel.services.account_service import AccountService
from group_kernel.services.base import BaseService
from group_kernel.services.company_service import CompanyService
from group_kernel.services.elimination_service import EliminationService
from group_kernel.services.intercompany_service import IntercompanyService

__all__ = [
    "AccountService",
    "BaseService",
    "CompanyService",
    "EliminationService",
    "IntercompanyService",
]
