"""Exception types raised by ``fraud_monitor``.

Both ingestion failures abort the run: a partially loaded dataset would
silently corrupt the account/transaction join and the per-merchant EMA
history, so nothing downstream (fraud check, reports) may run after one.
"""

from __future__ import annotations


class FraudMonitorError(Exception):
    """Base class for all package errors."""


class ParseError(FraudMonitorError, ValueError):
    """A feed row (or header) could not be normalized.

    ``feed``, ``line`` and ``column`` are optional context filled in as the
    error propagates from the field helpers up to the row readers.
    """

    def __init__(
        self,
        message: str,
        *,
        feed: str | None = None,
        line: int | None = None,
        column: str | None = None,
        value: str | None = None,
    ) -> None:
        self.reason = message
        self.feed = feed
        self.line = line
        self.column = column
        self.value = value
        super().__init__(self._render())

    def _render(self) -> str:
        where: list[str] = []
        if self.feed is not None:
            where.append(f"feed={self.feed}")
        if self.line is not None:
            where.append(f"line={self.line}")
        if self.column is not None:
            where.append(f"column={self.column}")
        if self.value is not None:
            where.append(f"value={self.value!r}")
        if not where:
            return self.reason
        return f"{self.reason} ({', '.join(where)})"

    def with_context(
        self,
        *,
        feed: str | None = None,
        line: int | None = None,
        column: str | None = None,
    ) -> ParseError:
        """Return a copy with any missing context fields filled in."""

        return ParseError(
            self.reason,
            feed=self.feed if self.feed is not None else feed,
            line=self.line if self.line is not None else line,
            column=self.column if self.column is not None else column,
            value=self.value,
        )


class StorageError(FraudMonitorError):
    """A read or write against the storage collaborator failed."""


__all__ = ["FraudMonitorError", "ParseError", "StorageError"]
