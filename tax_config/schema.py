"""
JurisdictionKnowledgeBase schema.

Defines the human-authored, reviewable tables the classification engines
read: EU membership, platform-supported jurisdictions, digital-service
detection vocabulary and the VAT thresholds.  YAML is parsed into these
types by the loader; once built, a knowledge base is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JurisdictionThresholds:
    """VAT thresholds declared for one jurisdiction (None = not declared)."""

    code: str
    distance_selling: Decimal | None = None
    vat_registration: Decimal | None = None


# ---------------------------------------------------------------------------
# Knowledge base
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JurisdictionKnowledgeBase:
    """
    Process-wide, read-only jurisdiction tables.

    Contract:
        * Codes are upper-case ISO-3166 alpha-3 style strings.
        * ``digital_service_keywords`` are lower-case and matched as
          case-insensitive substrings of invoice line descriptions.
        * Threshold lookups fall back to ``default_distance_selling_threshold``
          for distance selling and to "no threshold" for VAT registration.
    """

    config_id: str
    version: int
    eu_member_codes: frozenset[str]
    supported_jurisdiction_codes: frozenset[str]
    digital_service_keywords: tuple[str, ...]
    digital_product_types: frozenset[str] = frozenset({"digital_services"})
    default_distance_selling_threshold: Decimal = Decimal("10000")
    high_value_export_threshold: Decimal = Decimal("10000")
    jurisdiction_thresholds: tuple[JurisdictionThresholds, ...] = ()
    effective_from: date | None = None
    description: str = ""
    checksum: str = ""

    def is_eu_member(self, code: str | None) -> bool:
        return code is not None and code in self.eu_member_codes

    def is_supported(self, code: str | None) -> bool:
        return code is not None and code in self.supported_jurisdiction_codes

    def thresholds_for(self, code: str | None) -> JurisdictionThresholds | None:
        for entry in self.jurisdiction_thresholds:
            if entry.code == code:
                return entry
        return None

    def distance_selling_threshold(self, code: str | None) -> Decimal:
        """Annual B2C distance-selling threshold for the buyer's country."""
        entry = self.thresholds_for(code)
        if entry is not None and entry.distance_selling is not None:
            return entry.distance_selling
        return self.default_distance_selling_threshold

    def vat_registration_threshold(self, code: str | None) -> Decimal | None:
        """Local VAT registration threshold, or None when none applies."""
        entry = self.thresholds_for(code)
        if entry is None or not entry.vat_registration:
            return None
        return entry.vat_registration

    def matches_digital_keyword(self, text: str | None) -> bool:
        if not text:
            return False
        lowered = text.lower()
        return any(keyword in lowered for keyword in self.digital_service_keywords)
