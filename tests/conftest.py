"""
Pytest fixtures for the cross-border tax test suite.

Provides:
- The default jurisdiction knowledge base (loaded once per session)
- A shared CrossBorderTaxValidator
- Transaction builders matching the invoicing layer's payloads
- Structured log capture
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Any

import pytest

from tax_config import get_knowledge_base
from tax_config.schema import JurisdictionKnowledgeBase
from tax_engines.cross_border import CrossBorderTaxValidator
from tax_kernel.domain.transaction import TransactionData
from tax_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture tax_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, validator):
            validator.validate(transaction)
            logs = captured_logs()
            assert any(r["message"] == "cross_border_validation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("tax_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Knowledge base and validator
# =============================================================================


@pytest.fixture(scope="session")
def knowledge_base() -> JurisdictionKnowledgeBase:
    return get_knowledge_base()


@pytest.fixture(scope="session")
def validator(knowledge_base) -> CrossBorderTaxValidator:
    return CrossBorderTaxValidator(knowledge_base)


# =============================================================================
# Transactions
# =============================================================================


BASE_TRANSACTION: dict[str, Any] = {
    "seller_jurisdiction_code": "ESP",
    "buyer_jurisdiction_code": "ESP",
    "seller_establishment": "1",
    "buyer_location": "Madrid",
    "transaction_amount": Decimal("1000.00"),
    "product_types": ["goods"],
    "buyer_type": "business",
    "invoice_lines": [
        {"description": "Product 1", "quantity": 1, "unit_price": Decimal("100.00")},
        {"description": "Service consultation", "quantity": 2, "unit_price": Decimal("50.00")},
    ],
    "transaction_date": date(2026, 3, 2),
}


@pytest.fixture
def make_transaction():
    """Build a TransactionData from the base payload plus overrides."""

    def _make(**overrides: Any) -> TransactionData:
        return TransactionData.from_mapping({**BASE_TRANSACTION, **overrides})

    return _make
