"""Aggregate helpers shared by the CSV and statement-text ingestors."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal

from ..models import DateRange, FileMetadata, ParsedFileResult, RawTransaction


def total_abs_amount(transactions: Sequence[RawTransaction]) -> Decimal:
    return sum((abs(t.amount) for t in transactions), Decimal("0"))


def date_range_of(transactions: Sequence[RawTransaction]) -> DateRange:
    """Min/max of the ISO date strings; lexical order is chronological order.

    Caller guarantees ``transactions`` is non-empty.
    """

    dates = sorted(t.date for t in transactions)
    return DateRange(start=dates[0], end=dates[-1])


def build_parsed_result(
    transactions: Sequence[RawTransaction],
    errors: Sequence[str],
    *,
    filename: str,
    parsed_at: datetime | None = None,
) -> ParsedFileResult:
    """Assemble a :class:`ParsedFileResult` from accepted rows and row errors."""

    txs = tuple(transactions)
    return ParsedFileResult(
        transactions=txs,
        total_amount=total_abs_amount(txs),
        date_range=date_range_of(txs),
        errors=tuple(errors),
        metadata=FileMetadata(
            row_count=len(txs),
            original_filename=filename,
            parsed_at=parsed_at or datetime.now(UTC),
        ),
    )


__all__ = ["total_abs_amount", "date_range_of", "build_parsed_result"]
