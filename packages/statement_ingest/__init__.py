"""Public interface for the ``statement_ingest`` package.

Bank statement ingestion: CSV and PDF statements are parsed into normalized
transactions, categorized (remote classifier with a keyword-rule fallback),
optionally persisted, and summarized. This module only re-exports symbols.
"""

from .categorize import apply_manual_category, categorize_transactions
from .errors import IngestError, MissingColumnsError, PersistenceError
from .ingest import parse_csv, parse_statement_text
from .models import (
    BatchResult,
    CategorizedTransaction,
    CategoryResult,
    CategorySource,
    FileOutcome,
    FileStatus,
    ParsedFileResult,
    RawTransaction,
    UploadedFile,
)
from .orchestrator import ingest_batch
from .rules import categorize_with_rules, suggest_categories

__all__ = [
    # Operations
    "parse_csv",
    "parse_statement_text",
    "categorize_transactions",
    "categorize_with_rules",
    "suggest_categories",
    "apply_manual_category",
    "ingest_batch",
    # Models / types
    "RawTransaction",
    "CategoryResult",
    "CategorizedTransaction",
    "CategorySource",
    "ParsedFileResult",
    "UploadedFile",
    "FileOutcome",
    "FileStatus",
    "BatchResult",
    # Errors
    "IngestError",
    "MissingColumnsError",
    "PersistenceError",
]
