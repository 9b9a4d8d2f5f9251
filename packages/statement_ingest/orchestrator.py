"""Ingestion orchestrator: a batch of uploads to one :class:`BatchResult`.

Files are processed one at a time, each through parse -> categorize -> save.
A file-level failure is recorded against that file and the batch moves on;
a failed save marks the file ``unsaved`` but keeps its categorized rows in
the result. Only an empty batch raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal
from enum import StrEnum
from typing import Any, Protocol

from .categorize import categorize_transactions
from .classifier import Classifier
from .config import IngestSettings
from .errors import (
    FileTooLargeError,
    IngestError,
    PersistenceError,
    TextExtractionError,
    UnreadableFileError,
    UnsupportedFileTypeError,
)
from .extraction import PdfPlumberExtractor, TextExtractor
from .ingest import parse_csv, parse_statement_text
from .logging_setup import get_logger
from .models import (
    BatchResult,
    CategorizedTransaction,
    DateRange,
    FileOutcome,
    FileStatus,
    ParsedFileResult,
    UploadedFile,
)

_logger = get_logger("statement_ingest.orchestrator")


class FileKind(StrEnum):
    CSV = "csv"
    PDF = "pdf"


_CONTENT_TYPES: dict[str, FileKind] = {
    "text/csv": FileKind.CSV,
    "application/pdf": FileKind.PDF,
}

# Text encodings tried in order for CSV uploads.
_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp1252")


class TransactionSink(Protocol):
    async def save(
        self, transactions: Sequence[CategorizedTransaction], *, file_source: str
    ) -> Sequence[Any]:
        """Persist one file's transactions; raise :class:`PersistenceError` on failure."""
        ...


# ---------------------------------------------------------------------------
# Upload surface
# ---------------------------------------------------------------------------


def detect_file_kind(upload: UploadedFile) -> FileKind:
    """Pick the ingestor by extension, then by declared content type."""

    ext = upload.extension
    if ext in (FileKind.CSV, FileKind.PDF):
        return FileKind(ext)
    ctype = (upload.content_type or "").split(";", 1)[0].strip().lower()
    kind = _CONTENT_TYPES.get(ctype)
    if kind is not None:
        return kind
    raise UnsupportedFileTypeError(
        f"Unsupported file type: {ext or ctype or 'unknown'}. Please upload CSV or PDF files.",
        filename=upload.filename,
    )


def check_size(upload: UploadedFile, settings: IngestSettings) -> None:
    if upload.size > settings.max_file_bytes:
        raise FileTooLargeError(
            f"File too large: {upload.size} bytes exceeds the {settings.max_file_mb}MB limit",
            filename=upload.filename,
        )


def decode_text(upload: UploadedFile) -> str:
    for encoding in _ENCODINGS:
        try:
            return upload.content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise UnreadableFileError(
        "File content could not be decoded as text", filename=upload.filename
    )


async def parse_upload(
    upload: UploadedFile,
    *,
    extractor: TextExtractor,
    settings: IngestSettings,
) -> ParsedFileResult:
    """Validate one upload and run the matching ingestor.

    Raises an :class:`IngestError` subclass for every file-level failure.
    """

    kind = detect_file_kind(upload)
    check_size(upload, settings)
    if kind is FileKind.CSV:
        return parse_csv(decode_text(upload), filename=upload.filename)
    try:
        text = await extractor.extract(upload.content)
    except IngestError:
        raise
    except Exception as e:  # noqa: BLE001 - any extractor failure is file-level
        raise TextExtractionError(
            f"Failed to extract text from PDF: {e}", filename=upload.filename
        ) from e
    return parse_statement_text(text, filename=upload.filename)


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


async def ingest_batch(
    files: Iterable[UploadedFile],
    *,
    classifier: Classifier | None = None,
    extractor: TextExtractor | None = None,
    sink: TransactionSink | None = None,
    settings: IngestSettings | None = None,
) -> BatchResult:
    """Parse, categorize and (optionally) persist each file in order.

    ``classifier=None`` categorizes with keyword rules only; ``sink=None``
    skips persistence. Raises ``ValueError`` when ``files`` is empty.
    """

    uploads = list(files)
    if not uploads:
        raise ValueError("At least one file is required")
    settings = settings or IngestSettings()
    extractor = extractor or PdfPlumberExtractor()

    transactions: list[CategorizedTransaction] = []
    outcomes: list[FileOutcome] = []
    total = Decimal("0")
    start: str | None = None
    end: str | None = None
    counts: dict[str, int] = {}

    for upload in uploads:
        try:
            parsed = await parse_upload(upload, extractor=extractor, settings=settings)
        except IngestError as e:
            _logger.warning("orchestrator:file_failed file=%s error=%s", upload.filename, e)
            outcomes.append(
                FileOutcome(filename=upload.filename, status=FileStatus.FAILED, error=str(e))
            )
            continue

        categorized = await categorize_transactions(parsed.transactions, classifier=classifier)

        status = FileStatus.PROCESSED
        error: str | None = None
        if sink is not None:
            try:
                await sink.save(categorized, file_source=upload.filename)
            except PersistenceError as e:
                _logger.error("orchestrator:save_failed file=%s error=%s", upload.filename, e)
                status = FileStatus.UNSAVED
                error = f"Failed to save transactions: {e}"

        transactions.extend(categorized)
        total += parsed.total_amount
        start = parsed.date_range.start if start is None else min(start, parsed.date_range.start)
        end = parsed.date_range.end if end is None else max(end, parsed.date_range.end)
        for item in categorized:
            counts[item.category] = counts.get(item.category, 0) + 1
        outcomes.append(
            FileOutcome(
                filename=upload.filename,
                status=status,
                transaction_count=len(categorized),
                row_errors=parsed.errors,
                error=error,
            )
        )
        _logger.info(
            "orchestrator:file_done file=%s status=%s rows=%d row_errors=%d",
            upload.filename,
            status,
            len(categorized),
            len(parsed.errors),
        )

    date_range = DateRange(start, end) if start is not None and end is not None else None
    return BatchResult(
        transactions=tuple(transactions),
        total_amount=total,
        date_range=date_range,
        category_counts=counts,
        files=tuple(outcomes),
    )


__all__ = [
    "FileKind",
    "TransactionSink",
    "detect_file_kind",
    "check_size",
    "decode_text",
    "parse_upload",
    "ingest_batch",
]
