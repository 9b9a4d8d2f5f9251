"""Data models for ``statement_ingest``.

Records produced by the pipeline are frozen ``dataclass`` instances: an
ingestor emits :class:`RawTransaction` rows, the categorization engine wraps
each one in a new :class:`CategorizedTransaction` (never mutating the raw
record), and the orchestrator rolls files up into a :class:`BatchResult`.

Dates are ISO ``YYYY-MM-DD`` strings so that lexical order equals
chronological order; amounts are :class:`~decimal.Decimal` with the sign
convention positive = inflow/credit, negative = outflow/debit.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class CategorySource(StrEnum):
    """Provenance of a category assignment."""

    AI = "ai"
    RULES = "rules"
    MANUAL = "manual"


class TransactionType(StrEnum):
    DEBIT = "debit"
    CREDIT = "credit"


class FileStatus(StrEnum):
    """Per-file outcome within a batch.

    ``unsaved`` means the file parsed and categorized but the persistence
    collaborator rejected the save.
    """

    PROCESSED = "processed"
    FAILED = "failed"
    UNSAVED = "unsaved"


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawTransaction:
    """A structurally complete transaction straight out of an ingestor.

    ``description`` is non-empty and ``amount`` is always numeric; rows that
    cannot satisfy both are reported as row errors instead of being built.
    """

    date: str
    description: str
    amount: Decimal
    balance: Decimal | None = None
    merchant: str | None = None
    type: TransactionType | None = None
    reference: str | None = None

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValueError("RawTransaction.description must be non-empty")
        if not isinstance(self.amount, Decimal):
            raise TypeError("RawTransaction.amount must be a Decimal")

    def as_record(self) -> dict[str, Any]:
        """JSON-friendly mapping (amounts rendered as strings)."""

        return {
            "date": self.date,
            "description": self.description,
            "amount": str(self.amount),
            "balance": str(self.balance) if self.balance is not None else None,
            "merchant": self.merchant,
            "type": self.type.value if self.type is not None else None,
            "reference": self.reference,
        }


@dataclass(frozen=True, slots=True)
class CategoryResult:
    category: str
    confidence: float
    source: CategorySource
    subcategory: str | None = None


@dataclass(frozen=True, slots=True)
class CategorizedTransaction:
    """A raw transaction paired with its category assignment.

    ``confidence`` lies in ``[0, 1]``; ``category_source`` records whether the
    remote classifier, the keyword rules, or a person chose the category.
    """

    transaction: RawTransaction
    category: str
    confidence: float
    category_source: CategorySource
    subcategory: str | None = None

    def __post_init__(self) -> None:
        if not self.category or not self.category.strip():
            raise ValueError("CategorizedTransaction.category must be non-empty")
        if not 0.0 <= float(self.confidence) <= 1.0:
            raise ValueError("confidence must be within [0,1]")

    @property
    def date(self) -> str:
        return self.transaction.date

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount

    @property
    def description(self) -> str:
        return self.transaction.description

    @property
    def merchant(self) -> str | None:
        return self.transaction.merchant

    @classmethod
    def from_result(
        cls, transaction: RawTransaction, result: CategoryResult
    ) -> CategorizedTransaction:
        return cls(
            transaction=transaction,
            category=result.category,
            subcategory=result.subcategory,
            confidence=result.confidence,
            category_source=result.source,
        )


# ---------------------------------------------------------------------------
# Ingestor output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DateRange:
    start: str
    end: str


@dataclass(frozen=True, slots=True)
class FileMetadata:
    row_count: int
    original_filename: str
    parsed_at: datetime


@dataclass(frozen=True, slots=True)
class ParsedFileResult:
    """Output contract shared by every ingestor.

    ``errors`` holds one human-readable line per skipped row, 1-indexed against
    the source. ``metadata.row_count`` counts accepted transactions only.
    """

    transactions: tuple[RawTransaction, ...]
    total_amount: Decimal
    date_range: DateRange
    errors: tuple[str, ...]
    metadata: FileMetadata


# ---------------------------------------------------------------------------
# Uploads and batch results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UploadedFile:
    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lstrip(".").lower()


@dataclass(frozen=True, slots=True)
class FileOutcome:
    filename: str
    status: FileStatus
    transaction_count: int = 0
    row_errors: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Union of categorized transactions across a batch plus per-file outcomes.

    Processed, failed and unsaved files coexist; ``files`` preserves input
    order and ``transactions`` preserves per-file, then per-row order.
    """

    transactions: tuple[CategorizedTransaction, ...]
    total_amount: Decimal
    date_range: DateRange | None
    category_counts: Mapping[str, int]
    files: tuple[FileOutcome, ...] = field(default_factory=tuple)

    @property
    def failed_files(self) -> tuple[FileOutcome, ...]:
        return tuple(f for f in self.files if f.status is FileStatus.FAILED)

    @property
    def errors(self) -> list[str]:
        """File-level errors formatted as ``"<filename>: <message>"``."""

        return [f"{f.filename}: {f.error}" for f in self.files if f.error]


# ---------------------------------------------------------------------------
# DTOs for JSON output
# ---------------------------------------------------------------------------


class TransactionOut(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: str
    description: str
    amount: Decimal
    balance: Decimal | None = None
    merchant: str | None = None
    type: TransactionType | None = None
    reference: str | None = None
    category: str
    subcategory: str | None = None
    confidence: float
    category_source: CategorySource

    @classmethod
    def from_categorized(cls, item: CategorizedTransaction) -> TransactionOut:
        tx = item.transaction
        return cls(
            date=tx.date,
            description=tx.description,
            amount=tx.amount,
            balance=tx.balance,
            merchant=tx.merchant,
            type=tx.type,
            reference=tx.reference,
            category=item.category,
            subcategory=item.subcategory,
            confidence=item.confidence,
            category_source=item.category_source,
        )


class FileOutcomeOut(BaseModel):
    model_config = ConfigDict(extra="forbid")

    filename: str
    status: FileStatus
    transaction_count: int
    row_errors: list[str]
    error: str | None = None


class BatchReport(BaseModel):
    """Serialized view of a :class:`BatchResult` for the CLI ``--json`` flag."""

    model_config = ConfigDict(extra="forbid")

    total_amount: Decimal
    date_range: dict[str, str] | None
    category_counts: dict[str, int]
    files: list[FileOutcomeOut]
    transactions: list[TransactionOut]

    @classmethod
    def from_result(cls, result: BatchResult) -> BatchReport:
        return cls(
            total_amount=result.total_amount,
            date_range=(
                {"start": result.date_range.start, "end": result.date_range.end}
                if result.date_range is not None
                else None
            ),
            category_counts=dict(result.category_counts),
            files=[
                FileOutcomeOut(
                    filename=f.filename,
                    status=f.status,
                    transaction_count=f.transaction_count,
                    row_errors=list(f.row_errors),
                    error=f.error,
                )
                for f in result.files
            ],
            transactions=[TransactionOut.from_categorized(t) for t in result.transactions],
        )


# Generic collections
type Transactions = Sequence[RawTransaction]
type CategorizedTransactions = Sequence[CategorizedTransaction]


__all__ = [
    "CategorySource",
    "TransactionType",
    "FileStatus",
    "RawTransaction",
    "CategoryResult",
    "CategorizedTransaction",
    "DateRange",
    "FileMetadata",
    "ParsedFileResult",
    "UploadedFile",
    "FileOutcome",
    "BatchResult",
    "TransactionOut",
    "FileOutcomeOut",
    "BatchReport",
    "Transactions",
    "CategorizedTransactions",
]
