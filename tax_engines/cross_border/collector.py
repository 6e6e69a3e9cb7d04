"""
Document & Recommendation Collector.

Derives the required-documents list and the advisory recommendations from
the classification flags and the completed rule entries.  Both lists keep a
stable order and contain no duplicates.  Recommendations never influence
validity.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from tax_engines.cross_border.cross_border_types import (
    EntryStatus,
    RuleContext,
    ValidationEntry,
)

EU_B2B_DOCUMENTS: tuple[str, ...] = (
    "Valid VAT number verification",
    "Proof of goods movement within EU",
    "Invoice with correct reverse charge mention",
)
EXPORT_DOCUMENTS: tuple[str, ...] = (
    "Export declaration",
    "Proof of export (shipping documents)",
    "Customer purchase order",
)
BASE_DOCUMENTS: tuple[str, ...] = (
    "Commercial invoice",
    "Contract/Purchase order",
)
CROSS_BORDER_DOCUMENTS: tuple[str, ...] = ("Proof of customer location",)
HIGH_VALUE_EXPORT_DOCUMENTS: tuple[str, ...] = ("Customer identification documents",)

EU_B2B_RECOMMENDATIONS: tuple[str, ...] = (
    "Verify buyer VAT number through VIES system",
    "Include reverse charge clause on invoice",
    "Maintain proof of intra-EU supply",
)
EU_B2C_RECOMMENDATIONS: tuple[str, ...] = (
    "Monitor distance selling thresholds",
    "Consider OSS registration for digital services",
    "Apply destination country VAT rate if threshold exceeded",
)
EXPORT_RECOMMENDATIONS: tuple[str, ...] = (
    "Maintain export documentation",
    "Verify customer location for digital services",
    "Consider local tax registration requirements",
)
DIGITAL_CROSS_BORDER_RECOMMENDATIONS: tuple[str, ...] = (
    "Determine customer location for VAT purposes",
    "Consider local VAT registration",
    "Apply destination country VAT rate",
)


def _unique(groups: Iterable[Iterable[str]]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return tuple(seen)


def collect_required_documents(
    ctx: RuleContext,
    entries: Mapping[str, ValidationEntry],
) -> tuple[str, ...]:
    """Union of the document lists keyed to the active flags and entries."""
    groups: list[tuple[str, ...]] = []

    reverse_charge = entries.get("reverse_charge")
    if reverse_charge is not None and reverse_charge.required:
        groups.append(EU_B2B_DOCUMENTS)

    export_exemption = entries.get("export_exemption")
    if export_exemption is not None and export_exemption.applicable:
        groups.append(EXPORT_DOCUMENTS)

    groups.append(BASE_DOCUMENTS)

    if ctx.flags.cross_border:
        groups.append(CROSS_BORDER_DOCUMENTS)

    if ctx.is_high_value_export:
        groups.append(HIGH_VALUE_EXPORT_DOCUMENTS)

    return _unique(groups)


def collect_recommendations(
    ctx: RuleContext,
    entries: Mapping[str, ValidationEntry],
) -> tuple[str, ...]:
    """Advisory strings derived from the same flags and entries."""
    groups: list[tuple[str, ...]] = []

    reverse_charge = entries.get("reverse_charge")
    if reverse_charge is not None and reverse_charge.required:
        groups.append(EU_B2B_RECOMMENDATIONS)

    if "distance_selling" in entries:
        groups.append(EU_B2C_RECOMMENDATIONS)

    if "export_exemption" in entries:
        groups.append(EXPORT_RECOMMENDATIONS)

    if "digital_vat_location" in entries:
        groups.append(DIGITAL_CROSS_BORDER_RECOMMENDATIONS)

    return _unique(groups)


def documentation_entry(documents: tuple[str, ...]) -> ValidationEntry:
    """Derived entry listing the documents the transaction needs."""
    return ValidationEntry(
        name="documentation",
        status=EntryStatus.INFO,
        message=f"{len(documents)} documents required",
        documents=documents,
    )
