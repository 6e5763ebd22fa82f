"""
Group Kernel - multi-company hierarchy and consolidation core.

An in-process store and service layer for a company group with:
- Strict 3-level hierarchy (holding -> subsidiary -> branch)
- Per-company chart of accounts with header roll-ups
- Inter-company elimination entries
- Typed, code-carrying errors and structured logging
"""

__version__ = "0.1.0"
