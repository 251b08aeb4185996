"""Logging for ``fraud_monitor``.

Library modules obtain loggers through :func:`get_logger` and never attach
handlers. Until an entry point calls :func:`configure_logging`, the package
logger carries only a ``NullHandler``, so embedding applications decide where
ingestion and rule-engine messages go.

The level comes from the ``level`` argument, then ``FRAUD_MONITOR_LOG_LEVEL``,
then ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "fraud_monitor"
_LEVEL_ENV = "FRAUD_MONITOR_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_CONFIGURED = False


def resolve_level(level: int | str | None = None) -> tuple[int, str | None]:
    """Return ``(numeric_level, unrecognized)`` for a level or level name.

    ``unrecognized`` is the raw value when it named no known level; the
    numeric level then falls back to ``INFO``.
    """

    if level is None:
        level = os.getenv(_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level, None
    name = level.strip().upper()
    if name.isdigit():
        return int(name), None
    numeric = logging.getLevelNamesMapping().get(name)
    if numeric is None:
        return logging.INFO, level
    return numeric, None


def configure_logging(
    level: int | str | None = None,
    *,
    stream: IO[str] | None = None,
    fmt: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Attach one stream handler to the package logger; later calls are no-ops."""

    global _CONFIGURED
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _CONFIGURED:
        return logger

    numeric, unrecognized = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))

    logger.handlers = [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]
    logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False
    _CONFIGURED = True

    if unrecognized is not None:
        logger.warning("unknown log level %r; using INFO", unrecognized)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a ``fraud_monitor.*`` module."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
