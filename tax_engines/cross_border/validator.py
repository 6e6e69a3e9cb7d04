"""
CrossBorderTaxValidator -- classify a transaction and evaluate VAT treatment.

Decides, for one transaction, which treatment applies (domestic tax,
intra-EU reverse charge, EU distance selling, digital place-of-supply,
export exemption) and which documents and follow-ups it needs.

Architecture: tax_engines -- pure calculation, zero I/O.  The knowledge
base is injected at construction and never mutated; the validator holds no
per-transaction state, so one instance can serve concurrent callers.

Invariants enforced:
    - Purity: ``validate`` never mutates the transaction and returns a new
      immutable ``ValidationResults``.
    - Determinism: identical input always yields an equal result.
    - No exceptions for partial input: rules whose guards do not hold are
      skipped.

Usage:
    validator = CrossBorderTaxValidator(get_knowledge_base())
    results = validator.validate(TransactionData(
        seller_jurisdiction_code="ESP",
        buyer_jurisdiction_code="PRT",
        buyer_type=BuyerType.BUSINESS,
        transaction_amount=Decimal("5000"),
    ))
    results.reverse_charge_required   # True
    results["tax_exemption"].applicable  # True
"""

from __future__ import annotations

import time
from collections.abc import Sequence

from tax_config.schema import JurisdictionKnowledgeBase
from tax_kernel.domain.transaction import TransactionData, TransactionFlags
from tax_kernel.logging_config import LogContext, get_logger

from tax_engines.cross_border.classifier import classify_transaction
from tax_engines.cross_border.collector import (
    collect_recommendations,
    collect_required_documents,
    documentation_entry,
)
from tax_engines.cross_border.cross_border_types import (
    RuleContext,
    TaxRule,
    ValidationEntry,
    ValidationResults,
)
from tax_engines.cross_border.rules import DEFAULT_RULES
from tax_engines.cross_border.summary import summarize
from tax_engines.tracer import traced_engine

logger = get_logger("engines.cross_border")

# Entries synthesized after the rule chain runs
_RESERVED_ENTRY_NAMES = frozenset({"documentation", "summary"})


class CrossBorderTaxValidator:
    """
    Evaluate cross-border VAT treatment for transactions.

    Pure functions - no I/O, no database access.
    Jurisdiction tables provided at construction.
    """

    def __init__(
        self,
        knowledge_base: JurisdictionKnowledgeBase | None = None,
        rules: Sequence[TaxRule] = DEFAULT_RULES,
    ):
        if knowledge_base is None:
            from tax_config import get_knowledge_base

            knowledge_base = get_knowledge_base()
        names = [rule.name for rule in rules]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate rule names in chain: {names}")
        reserved = _RESERVED_ENTRY_NAMES.intersection(names)
        if reserved:
            raise ValueError(f"Rule names reserved for derived entries: {sorted(reserved)}")
        self._knowledge_base = knowledge_base
        self._rules = tuple(rules)

    @property
    def knowledge_base(self) -> JurisdictionKnowledgeBase:
        return self._knowledge_base

    @property
    def rules(self) -> tuple[TaxRule, ...]:
        return self._rules

    def classify(self, transaction: TransactionData) -> TransactionFlags:
        """Cross-border / EU / export / digital-services flags."""
        return classify_transaction(transaction, self._knowledge_base)

    def validate(
        self,
        transaction: TransactionData,
        *,
        invoice_id: str | None = None,
        company_id: str | None = None,
    ) -> ValidationResults:
        """
        Run the rule chain and assemble the immutable result.

        Args:
            transaction: The transaction to classify.
            invoice_id: Invoice being issued; bound to every log record
                of the run, TAX_ENGINE_TRACE included.
            company_id: Issuing company; bound the same way.

        Returns:
            ValidationResults with entries, documents, recommendations
            and summary.
        """
        with LogContext.bind(invoice_id=invoice_id, company_id=company_id):
            return self._evaluate(transaction)

    @traced_engine("cross_border_tax", "1.0", fingerprint_fields=("transaction",))
    def _evaluate(self, transaction: TransactionData) -> ValidationResults:
        t0 = time.monotonic()
        logger.info("cross_border_validation_started", extra={
            "seller_jurisdiction": transaction.seller_jurisdiction_code,
            "buyer_jurisdiction": transaction.buyer_jurisdiction_code,
            "buyer_type": transaction.buyer_type.value if transaction.buyer_type else None,
            "transaction_amount": (
                str(transaction.transaction_amount)
                if transaction.transaction_amount is not None
                else None
            ),
            "line_count": len(transaction.invoice_lines),
        })

        flags = self.classify(transaction)
        ctx = RuleContext(
            transaction=transaction,
            flags=flags,
            knowledge_base=self._knowledge_base,
        )

        entries: dict[str, ValidationEntry] = {}
        for rule in self._rules:
            entry = rule.evaluate(ctx)
            if entry is None:
                logger.debug("cross_border_rule_skipped", extra={"rule": rule.name})
                continue
            entries[rule.name] = entry

        documents = collect_required_documents(ctx, entries)
        recommendations = collect_recommendations(ctx, entries)
        entries["documentation"] = documentation_entry(documents)

        ordered = tuple(entries.values())
        summary = summarize(
            ordered,
            recommendations_count=len(recommendations),
            documents_required=len(documents),
        )

        results = ValidationResults(
            flags=flags,
            entries=ordered,
            required_documents=documents,
            recommendations=recommendations,
            summary=summary,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("cross_border_validation_completed", extra={
            "transaction_kind": flags.kind.value,
            "digital_services": flags.digital_services,
            "rules_applied": list(entries),
            "status": summary.status.value,
            "errors": summary.errors,
            "warnings": summary.warnings,
            "documents_required": summary.documents_required,
            "duration_ms": duration_ms,
        })

        return results

    def required_documents(self, transaction: TransactionData) -> tuple[str, ...]:
        return self.validate(transaction).required_documents

    def recommendations(self, transaction: TransactionData) -> tuple[str, ...]:
        return self.validate(transaction).recommendations

    def is_valid(self, transaction: TransactionData) -> bool:
        """True unless a finding blocks the transaction; warnings do not."""
        return self.validate(transaction).is_valid


# Convenience function for one-off callers

def validate_cross_border_transaction(
    transaction: TransactionData,
    knowledge_base: JurisdictionKnowledgeBase | None = None,
    *,
    invoice_id: str | None = None,
    company_id: str | None = None,
) -> ValidationResults:
    """
    Validate a single transaction with the default rule chain.

    Args:
        transaction: The transaction to classify.
        knowledge_base: Jurisdiction tables; loaded from the default
            configuration when omitted.
        invoice_id: Optional invoice identifier for the log context.
        company_id: Optional company identifier for the log context.

    Returns:
        ValidationResults
    """
    validator = CrossBorderTaxValidator(knowledge_base)
    return validator.validate(transaction, invoice_id=invoice_id, company_id=company_id)
