"""
Group Modules.

Thin orchestration layers over the group kernel and engines.

Modules:
- multi_company: company hierarchy, charts of accounts, eliminations,
  inter-company transactions and the consolidated report

Actual processing logic lives in the kernel and engines.
"""

from group_modules import multi_company

__all__ = ["multi_company"]
