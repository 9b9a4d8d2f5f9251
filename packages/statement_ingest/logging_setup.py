"""Logging for the ``statement_ingest`` package.

Everything logs under the ``statement_ingest`` logger. Library modules take a
child logger from :func:`get_logger` and emit ``event:key=value`` messages;
only an entrypoint calls :func:`configure_logging`, which installs the one
stream handler the package owns. Until then a ``NullHandler`` keeps ingestion
silent when embedded in another application.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

ROOT_LOGGER = "statement_ingest"
LEVEL_ENV = "STATEMENT_INGEST_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Tag on the handler we install, so a second configure call can find it.
_HANDLER_NAME = "statement_ingest.stream"


def resolve_level(level: int | str | None = None) -> int:
    """Explicit ``level``, else ``STATEMENT_INGEST_LOG_LEVEL``, else ``INFO``.

    Names are case-insensitive; numeric strings are accepted; anything
    unrecognized resolves to ``INFO``.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    text = level.strip().upper()
    if text.isdigit():
        return int(text)
    return logging.getLevelNamesMapping().get(text, logging.INFO)


def _owned_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> logging.Logger:
    """Install the package stream handler and return the package logger.

    Calling it again is a no-op: the first configuration wins.
    """

    logger = logging.getLogger(ROOT_LOGGER)
    if _owned_handler(logger) is not None:
        return logger

    for handler in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(handler)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger of ``statement_ingest``; silent until configured."""

    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["ROOT_LOGGER", "LEVEL_ENV", "resolve_level", "configure_logging", "get_logger"]
