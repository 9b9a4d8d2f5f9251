"""Persistence collaborator backed by the shared ``db`` library.

Public API:
    - :func:`seed_categories`
    - :func:`save_categorized`
    - :func:`init_database`
    - :class:`SqlTransactionSink` (async adapter used by the orchestrator)

Category names are resolved to ``fin_categories.id``; names missing from the
table fall back to ``Other Income`` (amount >= 0) or ``Other Expenses``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import date

from db import Base
from db.client import get_engine, session_scope
from db.models.finance import FinCategory, FinTransaction
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .categories import CATALOGUE, default_for_amount
from .errors import PersistenceError
from .logging_setup import get_logger
from .models import CategorizedTransaction

_logger = get_logger("statement_ingest.persistence")


def seed_categories(session: Session) -> int:
    """Insert catalogue rows that are not present yet; return how many were added."""

    existing = set(session.scalars(select(FinCategory.id)).all())
    added = 0
    for category in CATALOGUE:
        if category.code in existing:
            continue
        session.add(
            FinCategory(
                id=category.code,
                name=category.name,
                kind=category.kind.value,
                icon=category.icon,
                color=category.color,
            )
        )
        added += 1
    session.flush()
    return added


def _category_ids(session: Session) -> dict[str, str]:
    rows = session.execute(select(FinCategory.name, FinCategory.id)).all()
    return {name: cid for name, cid in rows}


def _raw_data(item: CategorizedTransaction) -> dict:
    return {
        "confidence": item.confidence,
        "categorySource": item.category_source.value,
        "originalData": item.transaction.as_record(),
    }


def save_categorized(
    session: Session,
    transactions: Sequence[CategorizedTransaction],
    *,
    file_source: str,
) -> list[FinTransaction]:
    """Add one ``fin_transactions`` row per item and flush; the caller commits.

    Raises :class:`PersistenceError` when neither the category nor its
    sign-based default exists in ``fin_categories``.
    """

    ids = _category_ids(session)
    rows: list[FinTransaction] = []
    for item in transactions:
        category_id = ids.get(item.category)
        if category_id is None:
            fallback = default_for_amount(item.amount)
            category_id = ids.get(fallback)
            if category_id is None:
                raise PersistenceError(
                    f"Category {item.category!r} and fallback {fallback!r} are not seeded"
                )
            _logger.debug(
                "persistence:category_fallback category=%s fallback=%s", item.category, fallback
            )
        row = FinTransaction(
            date=date.fromisoformat(item.date),
            amount=item.amount,
            description=item.description,
            merchant=item.merchant,
            category_id=category_id,
            subcategory=item.subcategory,
            file_source=file_source,
            raw_data=_raw_data(item),
        )
        session.add(row)
        rows.append(row)
    session.flush()
    return rows


def init_database(database_url: str) -> int:
    """Create tables if missing and seed the catalogue; return rows seeded.

    Production databases are managed with the Alembic migrations in
    ``libs/db/alembic``; this is for local SQLite files and tests.
    """

    engine = get_engine(database_url=database_url)
    Base.metadata.create_all(bind=engine)
    with session_scope(database_url=database_url) as session:
        added = seed_categories(session)
    _logger.info("persistence:init_db added_categories=%d", added)
    return added


class SqlTransactionSink:
    """Async sink for :func:`statement_ingest.orchestrator.ingest_batch`.

    Each ``save`` runs in a worker thread inside its own transaction.
    """

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url

    def _save_sync(
        self, transactions: Sequence[CategorizedTransaction], file_source: str
    ) -> list[FinTransaction]:
        with session_scope(database_url=self._database_url) as session:
            return save_categorized(session, transactions, file_source=file_source)

    async def save(
        self, transactions: Sequence[CategorizedTransaction], *, file_source: str
    ) -> list[FinTransaction]:
        try:
            rows = await asyncio.to_thread(self._save_sync, list(transactions), file_source)
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e
        _logger.info("persistence:saved file=%s rows=%d", file_source, len(rows))
        return rows


__all__ = ["seed_categories", "save_categorized", "init_database", "SqlTransactionSink"]
