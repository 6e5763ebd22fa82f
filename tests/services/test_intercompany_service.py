"""
Tests for IntercompanyService.

Covers:
- Transaction creation with clock-derived date and generated number
- The approval lifecycle and rejected transitions
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from group_kernel.exceptions import (
    CompanyNotFoundError,
    InvalidFieldValueError,
    InvalidStatusTransitionError,
    TransactionNotFoundError,
)
from group_kernel.models.intercompany import ICTransactionStatus, ICTransactionType


@pytest.fixture
def pending(ic_service, group, test_actor_id):
    return ic_service.create_transaction(
        ICTransactionType.SERVICE, group["HOLD"].id, group["ALPHA"].id, "180000", test_actor_id
    )


class TestCreateTransaction:

    def test_defaults(self, pending, group):
        assert pending.status == ICTransactionStatus.PENDING
        assert pending.amount == Decimal("180000")
        assert pending.currency == "USD"
        # DeterministicClock default is 2024-12-31
        assert pending.transaction_date == date(2024, 12, 31)
        assert pending.transaction_number == "IC-2024-0001"
        assert pending.source_company_id == group["HOLD"].id

    def test_numbers_increment(self, ic_service, pending, group, test_actor_id):
        second = ic_service.create_transaction(
            "loan", group["HOLD"].id, group["BETA"].id, "250000", test_actor_id,
            transaction_date=date(2025, 1, 3),
        )
        assert second.transaction_number == "IC-2025-0002"

    def test_explicit_fields(self, ic_service, group, test_actor_id):
        txn = ic_service.create_transaction(
            "sale", group["ALPHA"].id, group["BETA"].id, "85000", test_actor_id,
            currency="EUR", transaction_date=date(2024, 12, 5),
            description="Goods", reference_number="REF-1", transaction_number="IC-X-1",
        )
        assert txn.currency == "EUR"
        assert txn.transaction_number == "IC-X-1"
        assert txn.reference_number == "REF-1"

    @pytest.mark.parametrize("amount", ["0", "-10", "NaN", "-Infinity", "ten"])
    def test_invalid_amount(self, ic_service, group, test_actor_id, amount):
        with pytest.raises(InvalidFieldValueError):
            ic_service.create_transaction(
                "sale", group["ALPHA"].id, group["BETA"].id, amount, test_actor_id
            )

    def test_unknown_type(self, ic_service, group, test_actor_id):
        with pytest.raises(InvalidFieldValueError):
            ic_service.create_transaction(
                "barter", group["ALPHA"].id, group["BETA"].id, "1", test_actor_id
            )

    def test_same_company(self, ic_service, group, test_actor_id):
        with pytest.raises(InvalidFieldValueError):
            ic_service.create_transaction(
                "sale", group["ALPHA"].id, group["ALPHA"].id, "1", test_actor_id
            )

    def test_unknown_company(self, ic_service, group, test_actor_id):
        with pytest.raises(CompanyNotFoundError):
            ic_service.create_transaction("sale", uuid4(), group["BETA"].id, "1", test_actor_id)


class TestLifecycle:

    def test_approve_then_complete(self, ic_service, pending, test_actor_id, captured_logs):
        approved = ic_service.approve(pending.id, test_actor_id)
        completed = ic_service.complete(pending.id, test_actor_id)

        assert approved.status == ICTransactionStatus.APPROVED
        assert completed.status == ICTransactionStatus.COMPLETED

        changes = [r for r in captured_logs() if r["message"] == "ic_transaction_status_changed"]
        assert [(c["from_status"], c["to_status"]) for c in changes] == [
            ("pending", "approved"),
            ("approved", "completed"),
        ]

    def test_cancel_pending(self, ic_service, pending, test_actor_id):
        assert ic_service.cancel(pending.id, test_actor_id).status == ICTransactionStatus.CANCELLED

    def test_cancel_approved(self, ic_service, pending, test_actor_id):
        ic_service.approve(pending.id, test_actor_id)
        assert ic_service.cancel(pending.id, test_actor_id).status == ICTransactionStatus.CANCELLED

    def test_complete_pending_rejected(self, ic_service, pending, test_actor_id):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            ic_service.complete(pending.id, test_actor_id)
        assert exc_info.value.from_status == "pending"
        assert exc_info.value.to_status == "completed"

    def test_completed_is_final(self, ic_service, pending, test_actor_id):
        ic_service.approve(pending.id, test_actor_id)
        ic_service.complete(pending.id, test_actor_id)
        with pytest.raises(InvalidStatusTransitionError):
            ic_service.cancel(pending.id, test_actor_id)

    def test_cancelled_is_final(self, ic_service, pending, test_actor_id):
        ic_service.cancel(pending.id, test_actor_id)
        with pytest.raises(InvalidStatusTransitionError):
            ic_service.approve(pending.id, test_actor_id)

    def test_unknown_transaction(self, ic_service, test_actor_id):
        with pytest.raises(TransactionNotFoundError):
            ic_service.approve(uuid4(), test_actor_id)
