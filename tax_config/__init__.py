"""
tax_config -- single public entrypoint for the jurisdiction knowledge base.

Responsibility:
    Provides the ONLY way to obtain the jurisdiction tables at runtime
    through ``get_knowledge_base()``.  Engines never read YAML files
    themselves; they receive a frozen ``JurisdictionKnowledgeBase``.

Invariants enforced:
    - Validation: the knowledge base must pass ``validate_knowledge_base``
      before it is returned.
    - Fingerprint pinning: when an APPROVED_FINGERPRINT file sits next to
      the YAML file, the computed checksum must match it.
    - Deterministic parsing: the same YAML always produces the same
      knowledge base and checksum.

Failure modes:
    - ``KnowledgeBaseNotFoundError`` -- the YAML file does not exist.
    - ``InvalidKnowledgeBaseError`` -- malformed YAML, missing keys or
      validation errors.
    - ``ConfigIntegrityError`` -- checksum mismatch against the pin file.

Audit relevance:
    Every successful load emits a ``TAX_CONFIG_TRACE`` log entry with the
    config_id, version and checksum, tying each classification back to the
    exact table version that produced it.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from tax_config.integrity import verify_fingerprint_pin
from tax_config.loader import load_yaml_file, parse_knowledge_base
from tax_config.schema import JurisdictionKnowledgeBase, JurisdictionThresholds
from tax_config.validator import validate_knowledge_base
from tax_kernel.exceptions import (
    InvalidKnowledgeBaseError,
    KnowledgeBaseNotFoundError,
)

_logger = logging.getLogger("tax_kernel.config")

DEFAULT_KNOWLEDGE_BASE_PATH = Path(__file__).parent / "sets" / "eu_vat" / "knowledge_base.yaml"


def get_knowledge_base(config_path: Path | None = None) -> JurisdictionKnowledgeBase:
    """Load, validate and verify the jurisdiction knowledge base.

    Non-goals:
        - Does NOT cache across calls; long-lived services hold the
          returned object for their lifetime.

    Args:
        config_path: Override path to the knowledge base YAML file.
            Defaults to tax_config/sets/eu_vat/knowledge_base.yaml.

    Returns:
        A frozen JurisdictionKnowledgeBase.

    Raises:
        KnowledgeBaseNotFoundError: If the file does not exist.
        InvalidKnowledgeBaseError: If parsing or validation fails.
        ConfigIntegrityError: If an APPROVED_FINGERPRINT pin does not match.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_KNOWLEDGE_BASE_PATH
    if not path.is_file():
        raise KnowledgeBaseNotFoundError(path)

    try:
        data = load_yaml_file(path)
        kb = parse_knowledge_base(data)
    except yaml.YAMLError as e:
        raise InvalidKnowledgeBaseError(str(path), [f"YAML error: {e}"]) from e
    except KeyError as e:
        raise InvalidKnowledgeBaseError(str(path), [f"missing key: {e.args[0]}"]) from e
    except (TypeError, ValueError) as e:
        raise InvalidKnowledgeBaseError(str(path), [str(e)]) from e

    validation = validate_knowledge_base(kb)
    if not validation.is_valid:
        raise InvalidKnowledgeBaseError(str(path), validation.errors)
    for warning in validation.warnings:
        _logger.warning("knowledge_base_validation_warning", extra={
            "config_id": kb.config_id,
            "warning": warning,
        })

    verify_fingerprint_pin(
        config_id=kb.config_id,
        checksum=kb.checksum,
        config_dir=path.parent,
    )

    _logger.info(
        "TAX_CONFIG_TRACE",
        extra={
            "trace_type": "TAX_CONFIG_TRACE",
            "config_id": kb.config_id,
            "config_version": kb.version,
            "checksum": kb.checksum,
            "eu_member_count": len(kb.eu_member_codes),
            "supported_jurisdictions": sorted(kb.supported_jurisdiction_codes),
            "keyword_count": len(kb.digital_service_keywords),
        },
    )

    return kb


__all__ = [
    "DEFAULT_KNOWLEDGE_BASE_PATH",
    "JurisdictionKnowledgeBase",
    "JurisdictionThresholds",
    "get_knowledge_base",
]
