"""Tests for the engine tracer decorator."""

from decimal import Decimal

import pytest

from group_engines.tracer import TRACE_TYPE, compute_input_fingerprint, traced_engine


@traced_engine("sample", "2.1", fingerprint_fields=("amount", "codes"))
def _sample_engine(amount, codes, note=None):
    return amount * 2


class TestFingerprint:

    def test_deterministic(self):
        args = {"amount": Decimal("10"), "codes": ["1110", "1120"]}
        assert compute_input_fingerprint(("amount", "codes"), args) == compute_input_fingerprint(
            ("amount", "codes"), dict(args)
        )

    def test_sensitive_to_values(self):
        one = compute_input_fingerprint(("amount",), {"amount": Decimal("10")})
        two = compute_input_fingerprint(("amount",), {"amount": Decimal("11")})
        assert one != two

    def test_mapping_key_order_ignored(self):
        one = compute_input_fingerprint(("m",), {"m": {"a": 1, "b": 2}})
        two = compute_input_fingerprint(("m",), {"m": {"b": 2, "a": 1}})
        assert one == two

    def test_missing_field_recorded_as_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )


class TestTracedEngine:

    def test_result_passed_through(self):
        assert _sample_engine(Decimal("4"), ["1110"]) == Decimal("8")

    def test_trace_record(self, captured_logs):
        _sample_engine(Decimal("4"), codes=["1110"])

        traces = [r for r in captured_logs() if r["message"] == TRACE_TYPE]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["logger"] == "group_kernel.engines.tracer"
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["duration_ms"] >= 0
        assert trace["function"] == "_sample_engine"

    def test_positional_and_keyword_calls_share_fingerprint(self, captured_logs):
        _sample_engine(Decimal("4"), ["1110"])
        _sample_engine(amount=Decimal("4"), codes=["1110"])

        fingerprints = [
            r["input_fingerprint"] for r in captured_logs() if r["message"] == TRACE_TYPE
        ]
        assert len(fingerprints) == 2
        assert fingerprints[0] == fingerprints[1]

    def test_unfingerprinted_argument_ignored(self, captured_logs):
        _sample_engine(Decimal("4"), ["1110"], note="a")
        _sample_engine(Decimal("4"), ["1110"], note="b")

        fingerprints = {
            r["input_fingerprint"] for r in captured_logs() if r["message"] == TRACE_TYPE
        }
        assert len(fingerprints) == 1

    def test_failure_traced_and_reraised(self, captured_logs):
        from group_kernel.exceptions import InvalidEliminationError

        @traced_engine("failing", "1.0")
        def _failing():
            raise InvalidEliminationError("e-1", "amount must be positive")

        with pytest.raises(InvalidEliminationError):
            _failing()

        [trace] = [r for r in captured_logs() if r["message"] == TRACE_TYPE]
        assert trace["outcome"] == "error"
        assert trace["error"] == "INVALID_ELIMINATION"
        assert trace["input_fingerprint"] == ""

    def test_success_outcome(self, captured_logs):
        _sample_engine(Decimal("1"), [])
        [trace] = [r for r in captured_logs() if r["message"] == TRACE_TYPE]
        assert trace["outcome"] == "ok"
        assert trace["error"] is None


def test_fingerprint_hashes_dtos_by_value():
    from uuid import UUID

    from group_kernel.domain.dtos import CompanyInfo
    from group_kernel.models.company import CompanyType

    company_id = UUID("00000000-0000-4000-a000-000000000001")

    def _info():
        return CompanyInfo(
            id=company_id, name="H", code="HOLD", company_type=CompanyType.HOLDING,
            parent_id=None, root_id=company_id, level=1, currency="USD",
        )

    one = compute_input_fingerprint(("companies",), {"companies": [_info()]})
    two = compute_input_fingerprint(("companies",), {"companies": (_info(),)})
    assert one == two
    assert len(one) == 16
