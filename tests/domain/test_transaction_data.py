"""
Tests for the transaction value objects.

TransactionData normalises its input on construction and from_mapping
never raises for garbled payloads.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from tax_kernel.domain.transaction import (
    BuyerType,
    InvoiceLine,
    TransactionData,
    TransactionFlags,
    TransactionKind,
    normalize_jurisdiction_code,
    to_decimal,
)


class TestNormalization:

    @pytest.mark.parametrize("raw,expected", [
        ("esp", "ESP"),
        ("  prt ", "PRT"),
        ("", None),
        ("   ", None),
        (None, None),
        (724, None),
    ])
    def test_jurisdiction_code(self, raw, expected):
        assert normalize_jurisdiction_code(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("1000.00", Decimal("1000.00")),
        (15000, Decimal("15000")),
        (Decimal("9.99"), Decimal("9.99")),
        (" 42 ", Decimal("42")),
        ("abc", None),
        ("NaN", None),
        ("Infinity", None),
        (True, None),
        (None, None),
        ([], None),
    ])
    def test_to_decimal(self, raw, expected):
        assert to_decimal(raw) == expected

    def test_buyer_type_parse(self):
        assert BuyerType.parse("Business") is BuyerType.BUSINESS
        assert BuyerType.parse(" consumer ") is BuyerType.CONSUMER
        assert BuyerType.parse(BuyerType.CONSUMER) is BuyerType.CONSUMER
        assert BuyerType.parse("government") is None
        assert BuyerType.parse(None) is None
        assert BuyerType.parse(1) is None


class TestTransactionData:

    def test_defaults(self):
        transaction = TransactionData()

        assert transaction.seller_jurisdiction_code is None
        assert transaction.product_types == frozenset()
        assert transaction.invoice_lines == ()
        assert transaction.transaction_amount is None

    def test_constructor_normalizes(self):
        transaction = TransactionData(
            seller_jurisdiction_code="esp",
            buyer_jurisdiction_code=" prt",
            transaction_amount="5000",
            product_types=["Digital_Services", " goods ", ""],
            buyer_type="business",
            invoice_lines=[{"description": "SaaS", "quantity": "2", "unit_price": "10"}],
            transaction_date=datetime(2026, 3, 2, 12, 30),
        )

        assert transaction.seller_jurisdiction_code == "ESP"
        assert transaction.buyer_jurisdiction_code == "PRT"
        assert transaction.transaction_amount == Decimal("5000")
        assert transaction.product_types == frozenset({"digital_services", "goods"})
        assert transaction.buyer_type is BuyerType.BUSINESS
        assert transaction.invoice_lines == (
            InvoiceLine("SaaS", Decimal("2"), Decimal("10")),
        )
        assert transaction.transaction_date == date(2026, 3, 2)

    def test_single_product_type_string(self):
        transaction = TransactionData(product_types="software")

        assert transaction.product_types == frozenset({"software"})

    def test_is_hashable(self, make_transaction):
        transaction = make_transaction()

        assert hash(transaction) == hash(make_transaction())

    def test_immutable(self, make_transaction):
        transaction = make_transaction()

        with pytest.raises(AttributeError):
            transaction.buyer_jurisdiction_code = "MEX"

    def test_line_descriptions_skip_blank(self):
        transaction = TransactionData(invoice_lines=[
            {"description": "Software license"},
            {"description": ""},
            {"description": None},
            {"quantity": 1},
        ])

        assert transaction.line_descriptions == ("Software license",)


class TestFromMapping:

    def test_full_payload(self, make_transaction):
        transaction = make_transaction()

        assert transaction.seller_jurisdiction_code == "ESP"
        assert transaction.buyer_type is BuyerType.BUSINESS
        assert len(transaction.invoice_lines) == 2
        assert transaction.invoice_lines[1].line_total == Decimal("100.00")

    def test_none_and_empty(self):
        assert TransactionData.from_mapping(None) == TransactionData()
        assert TransactionData.from_mapping({}) == TransactionData()

    def test_iso_date_string(self):
        transaction = TransactionData.from_mapping({"transaction_date": "2026-03-02"})

        assert transaction.transaction_date == date(2026, 3, 2)

    def test_garbled_values_degrade(self):
        transaction = TransactionData.from_mapping({
            "seller_jurisdiction_code": 34,
            "buyer_jurisdiction_code": "",
            "buyer_location": {"city": "Lisbon"},
            "transaction_amount": "lots",
            "product_types": 7,
            "buyer_type": "alien",
            "invoice_lines": "Product 1",
            "transaction_date": "yesterday",
        })

        assert transaction == TransactionData()

    def test_invoice_line_with_bad_fields(self):
        transaction = TransactionData.from_mapping({
            "invoice_lines": [{"description": 12, "quantity": "x", "unit_price": None}, "junk"],
        })

        line = transaction.invoice_lines[0]
        assert len(transaction.invoice_lines) == 1
        assert line.description is None
        assert line.quantity is None
        assert line.line_total is None


class TestTransactionFlags:

    @pytest.mark.parametrize("kind,cross_border,eu,export", [
        (TransactionKind.DOMESTIC, False, False, False),
        (TransactionKind.INTRA_EU, True, True, False),
        (TransactionKind.EXPORT, True, False, True),
    ])
    def test_views_derive_from_kind(self, kind, cross_border, eu, export):
        flags = TransactionFlags(kind=kind)

        assert flags.cross_border is cross_border
        assert flags.eu_transaction is eu
        assert flags.export_transaction is export

    def test_as_dict(self):
        flags = TransactionFlags(kind=TransactionKind.EXPORT, digital_services=True)

        assert flags.as_dict() == {
            "cross_border": True,
            "eu_transaction": False,
            "export_transaction": True,
            "digital_services": True,
        }
