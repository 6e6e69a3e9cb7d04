"""
Cross-border VAT classification and compliance validation.

Pure domain types plus the stateless validator.  The rule chain, the
collector and the summary aggregator are exposed for callers that assemble
their own chain.
"""

from tax_kernel.logging_config import get_logger

logger = get_logger("engines.cross_border")

from tax_engines.cross_border.cross_border_types import (
    EntryStatus,
    RuleContext,
    SummaryStatus,
    TaxRule,
    ValidationEntry,
    ValidationResults,
    ValidationSummary,
)

from tax_engines.cross_border.classifier import (
    classify_transaction,
    detect_digital_services,
    determine_transaction_kind,
)

from tax_engines.cross_border.rules import DEFAULT_RULES

from tax_engines.cross_border.collector import (
    collect_recommendations,
    collect_required_documents,
)

from tax_engines.cross_border.summary import summarize

from tax_engines.cross_border.validator import (
    CrossBorderTaxValidator,
    validate_cross_border_transaction,
)

__all__ = [
    # Types
    "EntryStatus",
    "SummaryStatus",
    "ValidationEntry",
    "ValidationSummary",
    "ValidationResults",
    "RuleContext",
    "TaxRule",
    # Classifier
    "classify_transaction",
    "detect_digital_services",
    "determine_transaction_kind",
    # Rule chain
    "DEFAULT_RULES",
    # Collector / summary
    "collect_required_documents",
    "collect_recommendations",
    "summarize",
    # Validator
    "CrossBorderTaxValidator",
    "validate_cross_border_transaction",
]
