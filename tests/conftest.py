"""Pytest configuration for test isolation.

The workspace is not necessarily installed, so ``packages/`` and the shared
``db`` library are put on ``sys.path`` here. Settings are read from the
process environment, and a developer's ``OPENAI_API_KEY`` or ``DATABASE_URL``
would otherwise switch tests onto the remote classifier or a real database;
an autouse fixture clears them per test. Cached SQLAlchemy engines are
disposed after every test so per-test SQLite files are released.
"""

# ruff: noqa: E402
from __future__ import annotations

import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
for _p in (_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

import pytest
from db.client import dispose_engines

_ENV_KEYS = (
    "OPENAI_API_KEY",
    "DATABASE_URL",
    "STATEMENT_INGEST_MAX_FILE_MB",
    "STATEMENT_INGEST_AI_ENABLED",
    "STATEMENT_INGEST_OPENAI_MODEL",
    "STATEMENT_INGEST_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # The CLI loads ``.env`` from the working directory; keep it empty.
    monkeypatch.chdir(tmp_path)
    yield
    dispose_engines()
