"""
Pure domain layer.

Immutable transaction DTOs with NO dependencies on I/O, configuration or
clock.  All domain objects are immutable and deterministic.
"""

from tax_kernel.domain.transaction import (
    BuyerType,
    InvoiceLine,
    TransactionData,
    TransactionFlags,
    TransactionKind,
    normalize_jurisdiction_code,
    to_decimal,
)

__all__ = [
    "BuyerType",
    "InvoiceLine",
    "TransactionData",
    "TransactionFlags",
    "TransactionKind",
    "normalize_jurisdiction_code",
    "to_decimal",
]
