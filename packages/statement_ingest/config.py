"""Runtime settings read from the environment.

Entrypoints load ``.env`` (python-dotenv) before calling :func:`load_settings`;
library code receives an :class:`IngestSettings` instance and never reads the
environment on its own.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_MAX_FILE_MB = 10
DEFAULT_OPENAI_MODEL = "gpt-5"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean (got {raw!r})")


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ValueError(f"{key} must be an integer (got {raw!r})") from e
    if value <= 0:
        raise ValueError(f"{key} must be positive (got {value})")
    return value


@dataclass(frozen=True, slots=True)
class IngestSettings:
    max_file_mb: int = DEFAULT_MAX_FILE_MB
    ai_enabled: bool = True
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_api_key: str | None = None
    database_url: str | None = None

    @property
    def max_file_bytes(self) -> int:
        return self.max_file_mb * 1024 * 1024

    @property
    def ai_available(self) -> bool:
        """AI path is on and has credentials."""

        return self.ai_enabled and bool(self.openai_api_key)


def load_settings(env: Mapping[str, str] | None = None) -> IngestSettings:
    """Build settings from ``env`` (defaults to ``os.environ``).

    Raises ``ValueError`` for malformed numeric/boolean values.
    """

    env = os.environ if env is None else env
    return IngestSettings(
        max_file_mb=_env_int(env, "STATEMENT_INGEST_MAX_FILE_MB", DEFAULT_MAX_FILE_MB),
        ai_enabled=_env_bool(env, "STATEMENT_INGEST_AI_ENABLED", True),
        openai_model=(env.get("STATEMENT_INGEST_OPENAI_MODEL") or DEFAULT_OPENAI_MODEL).strip(),
        openai_api_key=(env.get("OPENAI_API_KEY") or "").strip() or None,
        database_url=(env.get("DATABASE_URL") or "").strip() or None,
    )


__all__ = ["DEFAULT_MAX_FILE_MB", "DEFAULT_OPENAI_MODEL", "IngestSettings", "load_settings"]
