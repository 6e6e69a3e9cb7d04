"""Tests for the engine tracer (tax_engines/tracer.py)."""

from dataclasses import dataclass
from decimal import Decimal

from tax_engines.tracer import _canonicalize, compute_input_fingerprint, traced_engine
from tax_kernel.domain.transaction import BuyerType, TransactionData


@dataclass(frozen=True)
class _Point:
    x: int
    y: Decimal


class TestCanonicalize:

    def test_scalars(self):
        assert _canonicalize(None) == "null"
        assert _canonicalize(Decimal("1.50")) == "1.50"
        assert _canonicalize(True) == "True"
        assert _canonicalize(BuyerType.BUSINESS) == "business"

    def test_dataclass(self):
        assert _canonicalize(_Point(1, Decimal("2"))) == "_Point(x:1,y:2)"

    def test_set_order_independent(self):
        assert _canonicalize(frozenset({"b", "a"})) == _canonicalize({"a", "b"}) == "{a,b}"

    def test_dict_keys_sorted(self):
        assert _canonicalize({"b": 1, "a": 2}) == "{a:2,b:1}"


class TestFingerprint:

    def test_deterministic(self):
        args = {"transaction": TransactionData(buyer_jurisdiction_code="PRT")}

        first = compute_input_fingerprint(("transaction",), args)
        second = compute_input_fingerprint(("transaction",), dict(args))

        assert first == second
        assert len(first) == 16

    def test_equal_transactions_share_fingerprint(self):
        a = TransactionData(product_types=["software", "goods"], buyer_jurisdiction_code="prt")
        b = TransactionData(product_types=["goods", "software"], buyer_jurisdiction_code="PRT")

        assert compute_input_fingerprint(("t",), {"t": a}) == compute_input_fingerprint(
            ("t",), {"t": b}
        )

    def test_different_input_differs(self):
        a = compute_input_fingerprint(("t",), {"t": TransactionData(buyer_jurisdiction_code="PRT")})
        b = compute_input_fingerprint(("t",), {"t": TransactionData(buyer_jurisdiction_code="MEX")})

        assert a != b


class TestTracedEngine:

    def test_emits_trace(self, captured_logs):
        @traced_engine("demo_engine", "2.1", fingerprint_fields=("value",))
        def double(value):
            return value * 2

        assert double(21) == 42

        traces = [r for r in captured_logs() if r["message"] == "TAX_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "demo_engine"
        assert trace["engine_version"] == "2.1"
        assert trace["input_fingerprint"] == compute_input_fingerprint(("value",), {"value": 21})
        assert trace["duration_ms"] >= 0

    def test_positional_and_keyword_match(self, captured_logs):
        @traced_engine("demo_engine", "1.0", fingerprint_fields=("value",))
        def identity(value):
            return value

        identity(5)
        identity(value=5)

        prints = [
            r["input_fingerprint"] for r in captured_logs()
            if r["message"] == "TAX_ENGINE_TRACE"
        ]
        assert prints[0] == prints[1]

    def test_validator_is_traced(self, validator, make_transaction, captured_logs):
        validator.validate(make_transaction(buyer_jurisdiction_code="PRT"))

        traces = [r for r in captured_logs() if r["message"] == "TAX_ENGINE_TRACE"]
        assert traces[0]["engine_name"] == "cross_border_tax"
        assert traces[0]["function"] == "CrossBorderTaxValidator._evaluate"
