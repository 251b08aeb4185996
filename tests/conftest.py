"""Pytest configuration for test isolation.

Each test gets a clean environment: no inherited ``DATABASE_URL`` or
``FRAUD_MONITOR_*`` settings, no cached SQLAlchemy engines left over from a
previous test's temporary database, and an unconfigured package logger (the
CLI configures it against a stream that only lives for one invocation).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from db.client import dispose_engines
from fraud_monitor import logging_setup
from fraud_monitor.regions import RegionTable

from tests.helpers.db import bootstrap_sqlite_db

_ENV_VARS = (
    "DATABASE_URL",
    "FRAUD_MONITOR_LOG_LEVEL",
    "FRAUD_MONITOR_MIN_TRANSACTION_THRESHOLD",
    "FRAUD_MONITOR_THRESHOLD_MULTIPLIER",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    dispose_engines()
    pkg_logger = logging.getLogger("fraud_monitor")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    logging_setup._CONFIGURED = False


@pytest.fixture
def regions() -> RegionTable:
    return RegionTable.default()


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """A fresh file-backed SQLite database with the schema created."""

    return bootstrap_sqlite_db(tmp_path / "db" / "fraud.sqlite3")
