"""Exception types for file-level and collaborator failures.

Row/line problems are never raised: ingestors collect them as strings in
``ParsedFileResult.errors``. Everything here means "this file (or this save)
produced nothing usable".
"""

from __future__ import annotations

from collections.abc import Sequence


class IngestError(Exception):
    """A whole file yielded zero usable transactions."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message)
        self.filename = filename


class UnsupportedFileTypeError(IngestError):
    pass


class FileTooLargeError(IngestError):
    pass


class UnreadableFileError(IngestError):
    pass


class CsvParseError(IngestError):
    pass


class MissingColumnsError(IngestError):
    """Required ``date``/``description``/``amount`` columns were not resolved."""

    def __init__(
        self, headers: Sequence[str], *, missing: Sequence[str], filename: str | None = None
    ) -> None:
        self.headers = tuple(headers)
        self.missing = tuple(missing)
        super().__init__(
            "Required columns not found. Expected columns containing: date, description, "
            f"and amount (missing: {', '.join(self.missing)}). "
            f"Found headers: {', '.join(self.headers)}",
            filename=filename,
        )


class NoTransactionsError(IngestError):
    pass


class TextExtractionError(IngestError):
    pass


class PersistenceError(Exception):
    """The persistence collaborator failed; parsed data exists but is unsaved."""


class ClassificationError(Exception):
    """The remote classifier returned something other than one label per input."""


__all__ = [
    "IngestError",
    "UnsupportedFileTypeError",
    "FileTooLargeError",
    "UnreadableFileError",
    "CsvParseError",
    "MissingColumnsError",
    "NoTransactionsError",
    "TextExtractionError",
    "PersistenceError",
    "ClassificationError",
]
