"""
Knowledge Base Loader (``tax_config.loader``).

Responsibility
--------------
Loads the jurisdiction knowledge base YAML file and parses it into the
frozen ``tax_config.schema`` dataclasses.  This is internal tooling: the
single public entry point for runtime configuration is
``tax_config.get_knowledge_base()``.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required keys.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid date or amount (including NaN or infinity)  -> ``ValueError``.
* Section of the wrong shape (e.g. ``thresholds`` as a list)  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from tax_config.schema import JurisdictionKnowledgeBase, JurisdictionThresholds


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at top level of {path}, got {type(data).__name__}")
    return data


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """
    Parse an amount from YAML.

    Amounts should be quoted strings in YAML so they never pass through
    float; integers are accepted as well.  NaN and infinities are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, str, float)):
        raise ValueError(f"{field_name}: expected an amount, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"{field_name}: invalid amount {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"{field_name}: amount must be finite, got {value!r}")
    return amount


def require_mapping(value: Any, field_name: str) -> dict[str, Any]:
    """Return ``value`` if it is a mapping, else raise ValueError."""
    if not isinstance(value, dict):
        raise ValueError(f"{field_name}: expected a mapping, got {type(value).__name__}")
    return value


def require_list(value: Any, field_name: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{field_name}: expected a list, got {type(value).__name__}")
    return value


def parse_code_list(values: Any, field_name: str) -> frozenset[str]:
    """Parse a list of jurisdiction codes (upper-cased)."""
    return frozenset(str(v).strip().upper() for v in require_list(values, field_name))


def parse_jurisdiction_thresholds(data: Any, index: int) -> JurisdictionThresholds:
    """Parse one ``thresholds.jurisdictions`` entry."""
    entry = require_mapping(data, f"thresholds.jurisdictions[{index}]")
    code = str(entry["code"]).strip().upper()
    distance_selling = entry.get("distance_selling")
    vat_registration = entry.get("vat_registration")
    return JurisdictionThresholds(
        code=code,
        distance_selling=(
            parse_decimal(distance_selling, f"{code}.distance_selling")
            if distance_selling is not None
            else None
        ),
        vat_registration=(
            parse_decimal(vat_registration, f"{code}.vat_registration")
            if vat_registration is not None
            else None
        ),
    )


def parse_knowledge_base(data: dict[str, Any]) -> JurisdictionKnowledgeBase:
    """
    Parse a ``JurisdictionKnowledgeBase`` from a dict.

    Preconditions:
        - ``data`` must contain ``config_id``, ``eu_member_codes``,
          ``supported_jurisdictions`` and ``digital_services.keywords``.
    Postconditions:
        - Returns a frozen knowledge base whose ``checksum`` is the
          canonical hash of ``data``.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if a section has the wrong shape, or codes, dates or
            amounts cannot be parsed.
    """
    digital = require_mapping(data["digital_services"], "digital_services")
    thresholds = require_mapping(data.get("thresholds") or {}, "thresholds")

    keywords = require_list(digital["keywords"], "digital_services.keywords")
    product_types = require_list(
        digital.get("product_types", ["digital_services"]),
        "digital_services.product_types",
    )
    jurisdictions = require_list(
        thresholds.get("jurisdictions") or [], "thresholds.jurisdictions"
    )

    return JurisdictionKnowledgeBase(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        eu_member_codes=parse_code_list(data["eu_member_codes"], "eu_member_codes"),
        supported_jurisdiction_codes=parse_code_list(
            data["supported_jurisdictions"], "supported_jurisdictions"
        ),
        digital_service_keywords=tuple(
            str(k).strip().lower() for k in keywords if str(k).strip()
        ),
        digital_product_types=frozenset(str(t).strip().lower() for t in product_types),
        default_distance_selling_threshold=parse_decimal(
            thresholds.get("default_distance_selling", "10000"),
            "thresholds.default_distance_selling",
        ),
        high_value_export_threshold=parse_decimal(
            thresholds.get("high_value_export", "10000"),
            "thresholds.high_value_export",
        ),
        jurisdiction_thresholds=tuple(
            parse_jurisdiction_thresholds(entry, index)
            for index, entry in enumerate(jurisdictions)
        ),
        effective_from=(
            parse_date(data["effective_from"]) if data.get("effective_from") else None
        ),
        description=str(data.get("description", "")).strip(),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
