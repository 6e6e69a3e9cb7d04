"""
Structured JSON logging for the tax kernel.

Every record under the ``tax_kernel`` logger hierarchy is rendered as one
JSON line.  Request-scoped identifiers (correlation, invoice, company) live
in a single context variable and are merged into every record, so a
classification can be traced back to the invoice that triggered it.

Usage:
    configure_logging(level=logging.INFO)
    with LogContext.bind(invoice_id="INV-2026-0042", company_id="7"):
        validator.validate(transaction)
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "tax_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

# Replaced, never mutated: each set/bind installs a new dict.
_context: ContextVar[dict[str, str]] = ContextVar("tax_log_context", default={})


def _merged(
    correlation_id: str | None,
    invoice_id: str | None,
    company_id: str | None,
) -> dict[str, str]:
    updates = {
        "correlation_id": correlation_id,
        "invoice_id": invoice_id,
        "company_id": company_id,
    }
    merged = dict(_context.get())
    merged.update({k: str(v) for k, v in updates.items() if v is not None})
    return merged


class LogContext:
    """Async-safe holder for the identifiers of the invoice being classified."""

    @staticmethod
    def set(
        *,
        correlation_id: str | None = None,
        invoice_id: str | None = None,
        company_id: str | None = None,
    ) -> None:
        """Set context fields. Only non-None values are updated."""
        _context.set(_merged(correlation_id, invoice_id, company_id))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set({})

    @staticmethod
    @contextmanager
    def bind(
        *,
        correlation_id: str | None = None,
        invoice_id: str | None = None,
        company_id: str | None = None,
    ) -> Iterator[None]:
        """Set fields for the duration of a block, then restore the previous ones."""
        token = _context.set(_merged(correlation_id, invoice_id, company_id))
        try:
            yield
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Amounts, enums, dates and tag sets as they appear in tax payloads."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        # Decimal, UUID and anything else render as their string form
        return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # TaxKernelError subclasses keep their context as public attributes
    for key, val in vars(exc).items():
        if not key.startswith("_"):
            fields[f"exc_{key}"] = val
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, val)
            for key, val in vars(record).items()
            if key not in _STDLIB_KEYS and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the tax_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def _structured_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if isinstance(h.formatter, StructuredFormatter)]


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the tax_kernel logger (idempotent)."""
    root_logger = logging.getLogger(_LOGGER_PREFIX)
    if _structured_handlers(root_logger):
        return

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root_logger.setLevel(level)
    root_logger.propagate = False
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
