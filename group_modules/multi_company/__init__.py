"""
Multi-Company Module (``group_modules.multi_company``).

Responsibility
--------------
ERP glue for a group of companies: the holding -> subsidiary -> branch
hierarchy, each company's chart of accounts, inter-company elimination
entries and transactions, and the consolidated report built from them.

Architecture position
---------------------
**Modules layer** -- a service facade that owns the transaction boundary
and delegates to ``group_kernel`` services and selectors and to the pure
``group_engines``.

Failure modes
-------------
* Every kernel ``GroupKernelError`` propagates to the caller after the
  session has been rolled back.
"""

from group_modules.multi_company.config import SYSTEM_ACTOR_ID, MultiCompanyConfig
from group_modules.multi_company.service import MultiCompanyService

__all__ = [
    "MultiCompanyConfig",
    "MultiCompanyService",
    "SYSTEM_ACTOR_ID",
]
