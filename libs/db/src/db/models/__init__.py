"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the finance models used by ``statement_ingest``.
"""

from .finance import Base, FinCategory, FinTransaction

__all__ = [
    "Base",
    "FinCategory",
    "FinTransaction",
]
