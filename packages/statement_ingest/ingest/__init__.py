"""Ingestors: file text in, :class:`~statement_ingest.models.ParsedFileResult` out."""

from .csv_ingest import parse_csv
from .statement_text import parse_statement_text

__all__ = ["parse_csv", "parse_statement_text"]
