"""
Cross-border tax validation domain types.

Pure frozen dataclasses and enums shared by the classifier, the rule chain,
the document/recommendation collector and the summary aggregator.

Architecture: tax_engines/cross_border -- pure domain, zero I/O.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from tax_config.schema import JurisdictionKnowledgeBase
from tax_kernel.domain.transaction import (
    BuyerType,
    TransactionData,
    TransactionFlags,
    TransactionKind,
)


# =============================================================================
# Enums
# =============================================================================


class EntryStatus(str, Enum):
    """Severity of a single validation entry."""

    SUCCESS = "success"
    INFO = "info"          # Informational, never affects status
    WARNING = "warning"    # Transaction proceeds, advisory
    ERROR = "error"        # Transaction blocked


class SummaryStatus(str, Enum):
    """Overall status across all entries."""

    SUCCESS = "success"
    WARNING = "warning"    # Warnings only, no errors
    ERROR = "error"        # At least one ERROR entry


# =============================================================================
# Entries
# =============================================================================


@dataclass(frozen=True)
class ValidationEntry:
    """One named finding produced by a rule.

    Only ``name``, ``status`` and ``message`` are always set; the remaining
    fields are populated by the rules that need them.
    """

    name: str
    status: EntryStatus
    message: str
    details: str | None = None
    applicable: bool | None = None
    required: bool | None = None
    threshold: Decimal | None = None
    requirements: tuple[str, ...] = ()
    jurisdictions: tuple[str, ...] = ()
    documents: tuple[str, ...] = ()
    transaction_kind: TransactionKind | None = None

    @property
    def is_error(self) -> bool:
        return self.status is EntryStatus.ERROR

    @property
    def is_warning(self) -> bool:
        return self.status is EntryStatus.WARNING

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view; unset optional fields are omitted."""
        data: dict[str, Any] = {
            "status": self.status.value,
            "message": self.message,
        }
        if self.details is not None:
            data["details"] = self.details
        if self.applicable is not None:
            data["applicable"] = self.applicable
        if self.required is not None:
            data["required"] = self.required
        if self.threshold is not None:
            data["threshold"] = str(self.threshold)
        if self.requirements:
            data["requirements"] = list(self.requirements)
        if self.jurisdictions:
            data["jurisdictions"] = list(self.jurisdictions)
        if self.documents:
            data["documents"] = list(self.documents)
        if self.transaction_kind is not None:
            data["type"] = self.transaction_kind.value
        return data


@dataclass(frozen=True)
class ValidationSummary:
    """Roll-up of every entry in a ValidationResults."""

    total_checks: int
    errors: int
    warnings: int
    recommendations_count: int
    documents_required: int
    status: SummaryStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "total_checks": self.total_checks,
            "errors": self.errors,
            "warnings": self.warnings,
            "recommendations_count": self.recommendations_count,
            "documents_required": self.documents_required,
        }


# =============================================================================
# Rule chain
# =============================================================================


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may read: the input, its flags and the tables."""

    transaction: TransactionData
    flags: TransactionFlags
    knowledge_base: JurisdictionKnowledgeBase

    @property
    def is_business_buyer(self) -> bool:
        return self.transaction.buyer_type is BuyerType.BUSINESS

    @property
    def is_consumer_buyer(self) -> bool:
        return self.transaction.buyer_type is BuyerType.CONSUMER

    @property
    def is_high_value_export(self) -> bool:
        amount = self.transaction.transaction_amount
        return (
            self.flags.export_transaction
            and amount is not None
            and amount >= self.knowledge_base.high_value_export_threshold
        )


@dataclass(frozen=True)
class TaxRule:
    """A named, independent check.

    ``evaluate`` returns the rule's entry, or None when its guard does not
    hold for the transaction (the rule is skipped).
    """

    name: str
    evaluate: Callable[[RuleContext], ValidationEntry | None]
    description: str = ""


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class ValidationResults(Mapping[str, ValidationEntry]):
    """Immutable outcome of validating one transaction.

    Behaves as a read-only ordered mapping from rule name to entry; every
    value is a ``ValidationEntry``.  The summary is not an entry: read it as
    ``results.summary``, or under ``"summary"`` in
    ``to_dict()["validation_results"]``.  ``results["summary"]`` raises
    KeyError, and no rule may take that name.  Flags, documents and
    recommendations are attributes as well.
    """

    flags: TransactionFlags
    entries: tuple[ValidationEntry, ...]
    required_documents: tuple[str, ...]
    recommendations: tuple[str, ...]
    summary: ValidationSummary

    def __getitem__(self, name: str) -> ValidationEntry:
        for entry in self.entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        return (entry.name for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_valid(self) -> bool:
        """True unless an entry blocks the transaction."""
        return self.summary.errors == 0

    @property
    def reverse_charge_required(self) -> bool:
        entry = self.get("reverse_charge")
        return entry is not None and entry.required is True

    @property
    def tax_exemption_applicable(self) -> bool:
        entry = self.get("tax_exemption")
        return entry is not None and entry.applicable is True

    @property
    def export_exemption_applicable(self) -> bool:
        entry = self.get("export_exemption")
        return entry is not None and entry.applicable is True

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly structure for the API layer."""
        results: dict[str, Any] = {entry.name: entry.to_dict() for entry in self.entries}
        results["summary"] = self.summary.to_dict()
        return {
            "valid_transaction": self.is_valid,
            "transaction_flags": self.flags.as_dict(),
            "validation_results": results,
            "required_documents": list(self.required_documents),
            "recommendations": list(self.recommendations),
        }
