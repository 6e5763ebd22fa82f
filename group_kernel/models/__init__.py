"""ORM models for the group store."""

from group_kernel.models.account import MAX_ACCOUNT_LEVEL, Account, AccountType
from group_kernel.models.company import (
    COMPANY_LEVELS,
    MAX_COMPANY_CODE_LENGTH,
    MAX_COMPANY_LEVEL,
    Company,
    CompanyType,
)
from group_kernel.models.elimination import EliminationEntryModel, EliminationType
from group_kernel.models.intercompany import (
    VALID_IC_TRANSITIONS,
    ICTransactionStatus,
    ICTransactionType,
    IntercompanyTransactionModel,
)

__all__ = [
    "Account",
    "AccountType",
    "MAX_ACCOUNT_LEVEL",
    "Company",
    "CompanyType",
    "COMPANY_LEVELS",
    "MAX_COMPANY_LEVEL",
    "MAX_COMPANY_CODE_LENGTH",
    "EliminationEntryModel",
    "EliminationType",
    "IntercompanyTransactionModel",
    "ICTransactionType",
    "ICTransactionStatus",
    "VALID_IC_TRANSITIONS",
]
