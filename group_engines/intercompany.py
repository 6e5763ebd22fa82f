"""
Module: group_engines.intercompany
Responsibility:
    Net the inter-company transactions between two companies.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Cancelled transactions never contribute.
    - intercompany_balance(a, b) == -intercompany_balance(b, a).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable
from uuid import UUID

from group_kernel.domain.dtos import IntercompanyTransaction
from group_kernel.models.intercompany import ICTransactionStatus


def intercompany_balance(
    entity_a: UUID,
    entity_b: UUID,
    transactions: Iterable[IntercompanyTransaction],
) -> Decimal:
    """
    Net amount flowing from ``entity_a`` to ``entity_b``.

    Transactions from a to b add, transactions from b to a subtract.  A
    positive result means b owes a.
    """
    net = Decimal("0")
    for txn in transactions:
        if txn.status == ICTransactionStatus.CANCELLED:
            continue
        if txn.source_company_id == entity_a and txn.target_company_id == entity_b:
            net += txn.amount
        elif txn.source_company_id == entity_b and txn.target_company_id == entity_a:
            net -= txn.amount
    return net
