"""DB helpers for tests: bootstrap a temporary SQLite DB with the category catalogue."""

from __future__ import annotations

from pathlib import Path

from db.client import session_scope
from db.models.finance import FinCategory, FinTransaction
from sqlalchemy import func, select

from statement_ingest.persistence import init_database


def bootstrap_sqlite_db(db_file: Path) -> str:
    """Create a file-backed SQLite database with tables and seeded categories.

    A file (rather than ``:memory:``) lets the worker-thread sessions used by
    the async sink see the same state.
    """

    db_file.parent.mkdir(parents=True, exist_ok=True)
    url = f"sqlite+pysqlite:///{db_file}"
    init_database(url)
    return url


def count_transactions(database_url: str) -> int:
    with session_scope(database_url=database_url) as session:
        return session.scalar(select(func.count()).select_from(FinTransaction)) or 0


def load_transactions(database_url: str) -> list[FinTransaction]:
    with session_scope(database_url=database_url) as session:
        return list(session.scalars(select(FinTransaction).order_by(FinTransaction.id)))


def category_ids(database_url: str) -> dict[str, str]:
    with session_scope(database_url=database_url) as session:
        return dict(session.execute(select(FinCategory.name, FinCategory.id)).all())
