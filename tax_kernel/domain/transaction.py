"""
Transaction value objects for cross-border tax classification.

Contract:
    ``TransactionData`` describes one commercial transaction as assembled by
    the invoicing layer (invoice record, seller establishment, resolved buyer
    location).  It is immutable and normalised on construction so that the
    engines can compare jurisdiction codes and inspect line descriptions
    without defensive checks.

Guarantees:
    - Immutable and hashable (frozen dataclasses, tuples, frozensets).
    - Jurisdiction codes are stripped and upper-cased; blank codes become
      ``None`` ("unknown").
    - Amounts are ``Decimal`` or ``None``, never float.
    - ``TransactionData.from_mapping`` never raises for bad field values:
      garbled input degrades to ``None`` or empty.

Non-goals:
    - Does NOT validate that codes exist in any registry.
    - Does NOT compute tax amounts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any


class BuyerType(str, Enum):
    """Who the buyer is for VAT purposes."""

    BUSINESS = "business"  # B2B, VAT-registered
    CONSUMER = "consumer"  # B2C, final consumer

    @classmethod
    def parse(cls, value: Any) -> BuyerType | None:
        """Lenient parse; unknown values map to None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class TransactionKind(str, Enum):
    """Jurisdiction relationship between seller and buyer."""

    DOMESTIC = "domestic"
    INTRA_EU = "eu"
    EXPORT = "export"


def normalize_jurisdiction_code(value: Any) -> str | None:
    """Strip and upper-case a jurisdiction code; blank or non-string is None."""
    if not isinstance(value, str):
        return None
    code = value.strip().upper()
    return code or None


def to_decimal(value: Any) -> Decimal | None:
    """Convert a loosely typed amount to Decimal, or None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result


@dataclass(frozen=True)
class InvoiceLine:
    """A single invoice line as seen by the classifier."""

    description: str | None = None
    quantity: Decimal | None = None
    unit_price: Decimal | None = None

    def __post_init__(self) -> None:
        if self.description is not None and not isinstance(self.description, str):
            object.__setattr__(self, "description", None)
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> InvoiceLine:
        return cls(
            description=data.get("description"),
            quantity=data.get("quantity"),
            unit_price=data.get("unit_price"),
        )

    @property
    def line_total(self) -> Decimal | None:
        if self.quantity is None or self.unit_price is None:
            return None
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class TransactionData:
    """
    Immutable description of a transaction to classify.

    Every field is optional.  A missing jurisdiction code is treated as
    "unknown": it never equals a present code.
    """

    seller_jurisdiction_code: str | None = None
    buyer_jurisdiction_code: str | None = None
    seller_establishment: str | None = None
    buyer_location: str | None = None
    transaction_amount: Decimal | None = None
    product_types: frozenset[str] = field(default_factory=frozenset)
    buyer_type: BuyerType | None = None
    invoice_lines: tuple[InvoiceLine, ...] = ()
    transaction_date: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "seller_jurisdiction_code",
            normalize_jurisdiction_code(self.seller_jurisdiction_code),
        )
        object.__setattr__(
            self,
            "buyer_jurisdiction_code",
            normalize_jurisdiction_code(self.buyer_jurisdiction_code),
        )
        object.__setattr__(
            self, "transaction_amount", to_decimal(self.transaction_amount)
        )
        object.__setattr__(self, "product_types", _product_type_set(self.product_types))
        object.__setattr__(self, "buyer_type", BuyerType.parse(self.buyer_type))
        object.__setattr__(self, "invoice_lines", _invoice_line_tuple(self.invoice_lines))
        if self.seller_establishment is not None:
            object.__setattr__(self, "seller_establishment", str(self.seller_establishment))
        if isinstance(self.transaction_date, datetime):
            object.__setattr__(self, "transaction_date", self.transaction_date.date())
        elif not isinstance(self.transaction_date, date):
            object.__setattr__(self, "transaction_date", None)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> TransactionData:
        """Build from a loosely typed mapping (e.g. a decoded API payload)."""
        if not data:
            return cls()
        raw_date = data.get("transaction_date")
        if isinstance(raw_date, str):
            try:
                raw_date = date.fromisoformat(raw_date.strip())
            except ValueError:
                raw_date = None
        location = data.get("buyer_location")
        return cls(
            seller_jurisdiction_code=data.get("seller_jurisdiction_code"),
            buyer_jurisdiction_code=data.get("buyer_jurisdiction_code"),
            seller_establishment=data.get("seller_establishment"),
            buyer_location=location if isinstance(location, str) else None,
            transaction_amount=data.get("transaction_amount"),
            product_types=data.get("product_types") or (),
            buyer_type=data.get("buyer_type"),
            invoice_lines=data.get("invoice_lines") or (),
            transaction_date=raw_date,
        )

    @property
    def line_descriptions(self) -> tuple[str, ...]:
        return tuple(
            line.description for line in self.invoice_lines if line.description
        )


@dataclass(frozen=True)
class TransactionFlags:
    """
    Classification outcome for a transaction.

    The kind is a single closed variant; the boolean views derive from it,
    so at most one of domestic / EU / export can ever be true.
    """

    kind: TransactionKind
    digital_services: bool = False

    @property
    def cross_border(self) -> bool:
        return self.kind is not TransactionKind.DOMESTIC

    @property
    def eu_transaction(self) -> bool:
        return self.kind is TransactionKind.INTRA_EU

    @property
    def export_transaction(self) -> bool:
        return self.kind is TransactionKind.EXPORT

    def as_dict(self) -> dict[str, bool]:
        return {
            "cross_border": self.cross_border,
            "eu_transaction": self.eu_transaction,
            "export_transaction": self.export_transaction,
            "digital_services": self.digital_services,
        }


def _product_type_set(value: Any) -> frozenset[str]:
    if isinstance(value, str):
        value = (value,)
    if not isinstance(value, Iterable):
        return frozenset()
    return frozenset(
        tag.strip().lower() for tag in value if isinstance(tag, str) and tag.strip()
    )


def _invoice_line_tuple(value: Any) -> tuple[InvoiceLine, ...]:
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        return ()
    lines: list[InvoiceLine] = []
    for item in value:
        if isinstance(item, InvoiceLine):
            lines.append(item)
        elif isinstance(item, Mapping):
            lines.append(InvoiceLine.from_mapping(item))
    return tuple(lines)
