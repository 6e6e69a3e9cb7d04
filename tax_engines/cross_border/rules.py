"""
Cross-border rule chain.

Each rule is an independent function ``(RuleContext) -> ValidationEntry |
None``.  A rule returns None when its guard does not hold (missing amount,
missing buyer type, wrong transaction kind) and never raises.

``DEFAULT_RULES`` fixes the evaluation order so that iteration and display
are deterministic; no rule reads another rule's output.

    transaction_type        always
    jurisdiction_support    always (warning for unsupported codes)
    reverse_charge          intra-EU B2B
    tax_exemption           intra-EU B2B
    distance_selling        intra-EU B2C
    oss_requirement         intra-EU B2C digital services
    export_exemption        export
    digital_export          export of digital services
    digital_services        digital services detected
    digital_vat_location    cross-border digital services
    vat_threshold           amount reaches a party's VAT registration threshold
    tax_registration        any registration requirement
"""

from __future__ import annotations

from decimal import Decimal

from tax_kernel.domain.transaction import TransactionKind

from tax_engines.cross_border.cross_border_types import (
    EntryStatus,
    RuleContext,
    TaxRule,
    ValidationEntry,
)

_UNKNOWN_JURISDICTION = "unknown"

_TRANSACTION_TYPE_TEXT: dict[TransactionKind, tuple[str, str]] = {
    TransactionKind.DOMESTIC: (
        "Domestic transaction",
        "Standard domestic tax rules apply",
    ),
    TransactionKind.INTRA_EU: (
        "Intra-EU transaction detected",
        "Special EU tax rules apply",
    ),
    TransactionKind.EXPORT: (
        "Export transaction detected",
        "Export tax exemption may apply",
    ),
}


def _label(code: str | None) -> str:
    return code if code is not None else _UNKNOWN_JURISDICTION


# ---------------------------------------------------------------------------
# Classification and support
# ---------------------------------------------------------------------------


def check_transaction_type(ctx: RuleContext) -> ValidationEntry:
    message, details = _TRANSACTION_TYPE_TEXT[ctx.flags.kind]
    return ValidationEntry(
        name="transaction_type",
        status=EntryStatus.INFO,
        message=message,
        details=details,
        transaction_kind=ctx.flags.kind,
    )


def check_jurisdiction_support(ctx: RuleContext) -> ValidationEntry:
    kb = ctx.knowledge_base
    unsupported: list[str] = []
    for code in (
        ctx.transaction.seller_jurisdiction_code,
        ctx.transaction.buyer_jurisdiction_code,
    ):
        label = _label(code)
        if not kb.is_supported(code) and label not in unsupported:
            unsupported.append(label)

    if unsupported:
        return ValidationEntry(
            name="jurisdiction_support",
            status=EntryStatus.WARNING,
            message=f"Unsupported jurisdictions: {', '.join(unsupported)}",
            details="Limited validation available for these jurisdictions",
            jurisdictions=tuple(unsupported),
        )
    return ValidationEntry(
        name="jurisdiction_support",
        status=EntryStatus.SUCCESS,
        message="All jurisdictions supported",
    )


# ---------------------------------------------------------------------------
# Intra-EU
# ---------------------------------------------------------------------------


def check_reverse_charge(ctx: RuleContext) -> ValidationEntry | None:
    if not (ctx.flags.eu_transaction and ctx.is_business_buyer):
        return None
    return ValidationEntry(
        name="reverse_charge",
        status=EntryStatus.INFO,
        message="Reverse charge mechanism applies",
        details="Customer pays VAT in their country",
        required=True,
    )


def check_tax_exemption(ctx: RuleContext) -> ValidationEntry | None:
    if not (ctx.flags.eu_transaction and ctx.is_business_buyer):
        return None
    return ValidationEntry(
        name="tax_exemption",
        status=EntryStatus.SUCCESS,
        message="Intra-EU supply exemption applies",
        details="Zero-rated for VAT in seller country",
        applicable=True,
    )


def check_distance_selling(ctx: RuleContext) -> ValidationEntry | None:
    if not (ctx.flags.eu_transaction and ctx.is_consumer_buyer):
        return None
    buyer = ctx.transaction.buyer_jurisdiction_code
    threshold = ctx.knowledge_base.distance_selling_threshold(buyer)
    return ValidationEntry(
        name="distance_selling",
        status=EntryStatus.WARNING,
        message="B2C distance selling rules may apply",
        details=f"Check if annual sales to {_label(buyer)} exceed €{threshold}",
        threshold=threshold,
        jurisdictions=(_label(buyer),),
    )


def check_oss_requirement(ctx: RuleContext) -> ValidationEntry | None:
    if not (
        ctx.flags.digital_services
        and ctx.flags.eu_transaction
        and ctx.is_consumer_buyer
    ):
        return None
    return ValidationEntry(
        name="oss_requirement",
        status=EntryStatus.INFO,
        message="OSS (One Stop Shop) registration may be required",
        details="For digital services to EU consumers",
        required=True,
    )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def check_export_exemption(ctx: RuleContext) -> ValidationEntry | None:
    if not ctx.flags.export_transaction:
        return None
    return ValidationEntry(
        name="export_exemption",
        status=EntryStatus.SUCCESS,
        message="Export tax exemption applicable",
        details="Zero-rated for domestic VAT",
        applicable=True,
    )


def check_digital_export(ctx: RuleContext) -> ValidationEntry | None:
    if not (ctx.flags.export_transaction and ctx.flags.digital_services):
        return None
    return ValidationEntry(
        name="digital_export",
        status=EntryStatus.WARNING,
        message="Digital services export rules apply",
        details="May be subject to destination country tax rules",
    )


# ---------------------------------------------------------------------------
# Digital services
# ---------------------------------------------------------------------------


def check_digital_services(ctx: RuleContext) -> ValidationEntry | None:
    if not ctx.flags.digital_services:
        return None
    return ValidationEntry(
        name="digital_services",
        status=EntryStatus.INFO,
        message="Digital services detected",
        details="Special VAT rules apply for digital services",
    )


def check_digital_vat_location(ctx: RuleContext) -> ValidationEntry | None:
    if not (ctx.flags.digital_services and ctx.flags.cross_border):
        return None
    return ValidationEntry(
        name="digital_vat_location",
        status=EntryStatus.WARNING,
        message="Digital services VAT location rules apply",
        details="VAT typically due in customer location country",
        jurisdictions=(_label(ctx.transaction.buyer_jurisdiction_code),),
    )


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def check_vat_threshold(ctx: RuleContext) -> ValidationEntry | None:
    amount = ctx.transaction.transaction_amount
    if amount is None:
        return None

    reached: list[str] = []
    lowest: Decimal | None = None
    for code in (
        ctx.transaction.seller_jurisdiction_code,
        ctx.transaction.buyer_jurisdiction_code,
    ):
        threshold = ctx.knowledge_base.vat_registration_threshold(code)
        if threshold is None or code in reached or amount < threshold:
            continue
        reached.append(code)
        lowest = threshold if lowest is None else min(lowest, threshold)

    if not reached:
        return None
    return ValidationEntry(
        name="vat_threshold",
        status=EntryStatus.WARNING,
        message=f"VAT registration threshold approached in {', '.join(reached)}",
        details="Consider local VAT registration",
        threshold=lowest,
        jurisdictions=tuple(reached),
    )


def check_tax_registration(ctx: RuleContext) -> ValidationEntry | None:
    buyer = _label(ctx.transaction.buyer_jurisdiction_code)
    requirements: list[str] = []

    if ctx.flags.eu_transaction and ctx.is_consumer_buyer:
        requirements.append(f"VAT registration in {buyer} (if threshold exceeded)")

    if ctx.flags.digital_services and ctx.flags.cross_border:
        requirements.append("OSS registration (for EU digital services)")
        requirements.append(f"Local tax registration in {buyer} (alternative to OSS)")

    if ctx.is_high_value_export:
        requirements.append(f"Local tax registration may be required in {buyer}")

    if not requirements:
        return None
    return ValidationEntry(
        name="tax_registration",
        status=EntryStatus.WARNING,
        message="Tax registration requirements detected",
        requirements=tuple(requirements),
    )


DEFAULT_RULES: tuple[TaxRule, ...] = (
    TaxRule("transaction_type", check_transaction_type, "Domestic / EU / export label"),
    TaxRule("jurisdiction_support", check_jurisdiction_support, "Platform jurisdiction coverage"),
    TaxRule("reverse_charge", check_reverse_charge, "EU B2B reverse charge"),
    TaxRule("tax_exemption", check_tax_exemption, "EU B2B intra-community exemption"),
    TaxRule("distance_selling", check_distance_selling, "EU B2C distance selling"),
    TaxRule("oss_requirement", check_oss_requirement, "One-Stop-Shop for EU B2C digital"),
    TaxRule("export_exemption", check_export_exemption, "Export zero-rating"),
    TaxRule("digital_export", check_digital_export, "Digital services exported outside the EU"),
    TaxRule("digital_services", check_digital_services, "Digital services detected"),
    TaxRule("digital_vat_location", check_digital_vat_location, "Place of supply at buyer location"),
    TaxRule("vat_threshold", check_vat_threshold, "Local VAT registration thresholds"),
    TaxRule("tax_registration", check_tax_registration, "Registration obligations"),
)
