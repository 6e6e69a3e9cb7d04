"""
Summary Aggregator -- rolls entries into counts and an overall status.

status is ERROR if any entry is an error, else WARNING if any entry is a
warning, else SUCCESS.  INFO and SUCCESS entries never change the status.
"""

from __future__ import annotations

from collections.abc import Sequence

from tax_engines.cross_border.cross_border_types import (
    SummaryStatus,
    ValidationEntry,
    ValidationSummary,
)


def summarize(
    entries: Sequence[ValidationEntry],
    recommendations_count: int,
    documents_required: int,
) -> ValidationSummary:
    errors = sum(1 for e in entries if e.is_error)
    warnings = sum(1 for e in entries if e.is_warning)

    if errors:
        status = SummaryStatus.ERROR
    elif warnings:
        status = SummaryStatus.WARNING
    else:
        status = SummaryStatus.SUCCESS

    return ValidationSummary(
        total_checks=len(entries),
        errors=errors,
        warnings=warnings,
        recommendations_count=recommendations_count,
        documents_required=documents_required,
        status=status,
    )
