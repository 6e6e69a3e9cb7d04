"""
Module: tax_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure tax
    engines.  This is the canonical import surface for the API / service
    layer that assembles transactions from invoices.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import tax_kernel (domain, logging) and tax_config.schema.

Invariants enforced:
    - Purity: engines NEVER read the clock or configuration files; the
      knowledge base is passed in.
    - Decimal-only amounts: thresholds and transaction amounts are
      ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every validation is traced via the ``@traced_engine`` decorator (see
    ``tax_engines.tracer``), emitting TAX_ENGINE_TRACE log records that
    include engine name, version, input fingerprint, and duration.

Usage:
    from tax_engines import CrossBorderTaxValidator
    from tax_kernel.domain import TransactionData
"""

from tax_kernel.logging_config import get_logger

logger = get_logger("engines")

from tax_engines.cross_border import (
    DEFAULT_RULES,
    CrossBorderTaxValidator,
    EntryStatus,
    RuleContext,
    SummaryStatus,
    TaxRule,
    ValidationEntry,
    ValidationResults,
    ValidationSummary,
    classify_transaction,
    validate_cross_border_transaction,
)

__all__ = [
    "CrossBorderTaxValidator",
    "validate_cross_border_transaction",
    "classify_transaction",
    "DEFAULT_RULES",
    "EntryStatus",
    "SummaryStatus",
    "ValidationEntry",
    "ValidationSummary",
    "ValidationResults",
    "RuleContext",
    "TaxRule",
]
