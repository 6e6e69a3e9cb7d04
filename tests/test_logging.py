"""Tests for the structured logging system (tax_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from pathlib import Path
from uuid import uuid4

import pytest

from tax_kernel.domain.transaction import BuyerType
from tax_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "tax_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("validated", extra={"warnings": 2, "status": "warning"})

        record = _parse_log(stream)
        assert record["warnings"] == 2
        assert record["status"] == "warning"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", invoice_id="inv-456")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["invoice_id"] == "inv-456"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_code_extracted(self):
        """Tax kernel exceptions carry .code attribute."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from tax_kernel.exceptions import KnowledgeBaseNotFoundError

        try:
            raise KnowledgeBaseNotFoundError(Path("/missing/knowledge_base.yaml"))
        except KnowledgeBaseNotFoundError:
            logger.error("knowledge_base_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "KNOWLEDGE_BASE_NOT_FOUND"
        assert record["exc_type"] == "KnowledgeBaseNotFoundError"
        assert record["exc_path"] == "/missing/knowledge_base.yaml"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "invoice_id" not in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_uuid", extra={"invoice_uuid": uid})

        record = _parse_log(stream)
        assert record["invoice_uuid"] == str(uid)

    def test_decimal_enum_and_set_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("typed", extra={
            "amount": Decimal("15000.00"),
            "buyer": BuyerType.CONSUMER,
            "tags": frozenset({"software", "goods"}),
        })

        record = _parse_log(stream)
        assert record["amount"] == "15000.00"
        assert record["buyer"] == "consumer"
        assert record["tags"] == ["goods", "software"]

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, debug is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", invoice_id="y")
        assert LogContext.get_all() == {"correlation_id": "x", "invoice_id": "y"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner"):
            assert LogContext.get_all()["correlation_id"] == "inner"
        assert LogContext.get_all()["correlation_id"] == "outer"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "company_id" not in LogContext.get_all()
        with LogContext.bind(company_id="temp"):
            assert LogContext.get_all()["company_id"] == "temp"
        assert "company_id" not in LogContext.get_all()

    def test_additive_set(self):
        LogContext.set(correlation_id="a")
        LogContext.set(invoice_id="b")
        ctx = LogContext.get_all()
        assert ctx["correlation_id"] == "a"
        assert ctx["invoice_id"] == "b"

    def test_all_fields(self):
        LogContext.set(correlation_id="c", invoice_id="i", company_id="co")
        ctx = LogContext.get_all()
        assert ctx == {"correlation_id": "c", "invoice_id": "i", "company_id": "co"}

    def test_values_stored_as_strings(self):
        LogContext.set(company_id=7)
        assert LogContext.get_all()["company_id"] == "7"

    def test_bind_restores_after_set_inside_block(self):
        LogContext.set(invoice_id="INV-1")
        with LogContext.bind(company_id="7"):
            LogContext.set(invoice_id="INV-2")
        assert LogContext.get_all() == {"invoice_id": "INV-1"}

    def test_bind_restores_on_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(invoice_id="INV-9"):
                raise RuntimeError("boom")
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("tax_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("engines.cross_border")
        assert logger.name == "tax_kernel.engines.cross_border"

    def test_logger_hierarchy(self):
        """Child loggers inherit the tax_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "tax_kernel.deep.nested.module"
