from __future__ import annotations

import io
import logging

import pytest

from fraud_monitor.logging_setup import configure_logging, get_logger, resolve_level


@pytest.mark.parametrize(
    "raw, expected",
    [
        (logging.DEBUG, (logging.DEBUG, None)),
        ("warning", (logging.WARNING, None)),
        (" 15 ", (15, None)),
        ("chatty", (logging.INFO, "chatty")),
    ],
)
def test_resolve_level(raw, expected):
    assert resolve_level(raw) == expected


def test_resolve_level_reads_env(monkeypatch):
    monkeypatch.setenv("FRAUD_MONITOR_LOG_LEVEL", "ERROR")
    assert resolve_level() == (logging.ERROR, None)


def test_library_logger_is_silent_until_configured():
    get_logger("fraud_monitor.rules")
    handlers = logging.getLogger("fraud_monitor").handlers
    assert [type(h) for h in handlers] == [logging.NullHandler]


def test_configure_logging_once_and_reports_bad_level():
    first, second = io.StringIO(), io.StringIO()

    logger = configure_logging("chatty", stream=first)
    configure_logging("DEBUG", stream=second)
    get_logger("fraud_monitor.api").info("ingested accounts=%d", 2)

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert not logger.propagate
    out = first.getvalue()
    assert "unknown log level 'chatty'; using INFO" in out
    assert "fraud_monitor.api: ingested accounts=2" in out
    assert second.getvalue() == ""
