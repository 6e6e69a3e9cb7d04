"""
Knowledge Base Validator (``tax_config.validator``).

Responsibility
--------------
Validates a parsed ``JurisdictionKnowledgeBase`` before it is handed to the
engines, so that a mistyped code or a negative threshold is caught when the
table is loaded rather than surfacing as a silently wrong classification.

Invariants enforced
-------------------
* Jurisdiction codes are three upper-case letters.
* The EU member list and the digital keyword list are non-empty.
* Thresholds are non-negative; distance-selling thresholds are positive.
* Threshold entries are unique per jurisdiction.

Failure modes
-------------
* Errors (``KnowledgeBaseValidationResult.errors``) -> the knowledge base
  MUST NOT be used.
* Warnings -> usable, but should be reviewed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal

from tax_config.schema import JurisdictionKnowledgeBase

_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")


@dataclass
class KnowledgeBaseValidationResult:
    """
    Result of knowledge base validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_knowledge_base(
    kb: JurisdictionKnowledgeBase,
) -> KnowledgeBaseValidationResult:
    """
    Validate a knowledge base.

    Postconditions:
        - Returns a result whose ``errors`` list is empty iff the knowledge
          base is safe to use.
    """
    result = KnowledgeBaseValidationResult()

    _validate_codes(kb, result)
    _validate_vocabulary(kb, result)
    _validate_thresholds(kb, result)

    return result


def _validate_codes(
    kb: JurisdictionKnowledgeBase, result: KnowledgeBaseValidationResult
) -> None:
    if not kb.eu_member_codes:
        result.add_error("eu_member_codes must not be empty")
    if not kb.supported_jurisdiction_codes:
        result.add_warning("supported_jurisdictions is empty; every code will be flagged")

    for label, codes in (
        ("eu_member_codes", kb.eu_member_codes),
        ("supported_jurisdictions", kb.supported_jurisdiction_codes),
    ):
        for code in sorted(codes):
            if not _CODE_PATTERN.match(code):
                result.add_error(f"{label}: '{code}' is not a three-letter code")


def _validate_vocabulary(
    kb: JurisdictionKnowledgeBase, result: KnowledgeBaseValidationResult
) -> None:
    if not kb.digital_service_keywords:
        result.add_error("digital_services.keywords must not be empty")
    if len(set(kb.digital_service_keywords)) != len(kb.digital_service_keywords):
        result.add_warning("digital_services.keywords contains duplicates")
    if not kb.digital_product_types:
        result.add_warning("digital_services.product_types is empty")


def _validate_thresholds(
    kb: JurisdictionKnowledgeBase, result: KnowledgeBaseValidationResult
) -> None:
    if kb.default_distance_selling_threshold <= Decimal("0"):
        result.add_error("thresholds.default_distance_selling must be positive")
    if kb.high_value_export_threshold < Decimal("0"):
        result.add_error("thresholds.high_value_export must not be negative")

    seen: set[str] = set()
    for entry in kb.jurisdiction_thresholds:
        if not _CODE_PATTERN.match(entry.code):
            result.add_error(f"thresholds: '{entry.code}' is not a three-letter code")
        if entry.code in seen:
            result.add_error(f"thresholds: duplicate entry for '{entry.code}'")
        seen.add(entry.code)

        if entry.distance_selling is not None and entry.distance_selling <= Decimal("0"):
            result.add_error(f"thresholds: {entry.code}.distance_selling must be positive")
        if entry.vat_registration is not None and entry.vat_registration < Decimal("0"):
            result.add_error(f"thresholds: {entry.code}.vat_registration must not be negative")
        if entry.distance_selling is not None and not kb.is_eu_member(entry.code):
            result.add_warning(
                f"thresholds: {entry.code} declares distance_selling but is not an EU member"
            )
