"""Delimited feed reading with a fixed record shape per feed.

Splitting follows RFC 4180 rules via the stdlib :mod:`csv` module, one
physical line at a time (the feeds carry no embedded newlines). Every field is
trimmed of surrounding whitespace; interior whitespace, including the tabs the
merchant-description heuristic relies on, is preserved.

The header is parsed once into a :class:`FeedSchema`; every subsequent row is
bound against it and a column-count mismatch fails fast.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import NamedTuple

from .errors import ParseError
from .logging_setup import get_logger
from .models import FeedName

_logger = get_logger("fraud_monitor.reader")

ACCOUNT_COLUMNS: tuple[str, ...] = (
    "last_name",
    "first_name",
    "street_address",
    "unit",
    "city",
    "state",
    "zip",
    "dob",
    "ssn",
    "email_address",
    "mobile_number",
    "account_number",
)

TRANSACTION_COLUMNS: tuple[str, ...] = (
    "account_number",
    "transaction_datetime",
    "transaction_amount",
    "post_date",
    "merchant_number",
    "merchant_description",
    "merchant_category_code",
    "transaction_number",
)

# Derived columns of the stored transaction layout; a feed may carry them.
TRANSACTION_OPTIONAL_COLUMNS: tuple[str, ...] = ("merchant_name", "transaction_state")

_REQUIRED: dict[str, tuple[str, ...]] = {
    "accounts": ACCOUNT_COLUMNS,
    "transactions": TRANSACTION_COLUMNS,
}
_OPTIONAL: dict[str, tuple[str, ...]] = {
    "accounts": (),
    "transactions": TRANSACTION_OPTIONAL_COLUMNS,
}


def split_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one delimited line into trimmed field values."""

    text = line.rstrip("\r\n")
    if not text.strip():
        return []
    fields = next(csv.reader([text], delimiter=delimiter))
    return [f.strip() for f in fields]


def parse_header(line: str, delimiter: str = ",") -> list[str]:
    """Return the column names from a header line."""

    return split_line(line, delimiter)


class RawRow(NamedTuple):
    """A bound feed row: raw (trimmed) values keyed by column name."""

    line: int
    values: dict[str, str]


@dataclass(frozen=True, slots=True)
class FeedSchema:
    """Column layout of a feed, fixed once the header has been read."""

    feed: FeedName
    columns: tuple[str, ...]

    @classmethod
    def from_header(cls, feed: FeedName, columns: Sequence[str]) -> FeedSchema:
        if feed not in _REQUIRED:
            raise ValueError(f"unknown feed: {feed!r}")
        cols = tuple(columns)
        if not cols:
            raise ParseError("feed has no header row", feed=feed, line=1)

        seen: set[str] = set()
        dupes: list[str] = []
        for c in cols:
            if c in seen and c not in dupes:
                dupes.append(c)
            seen.add(c)
        if dupes:
            raise ParseError("duplicate columns in header: " + ", ".join(dupes), feed=feed, line=1)

        required = _REQUIRED[feed]
        allowed = set(required) | set(_OPTIONAL[feed])
        missing = [c for c in required if c not in seen]
        if missing:
            raise ParseError("header is missing columns: " + ", ".join(missing), feed=feed, line=1)
        unknown = [c for c in cols if c not in allowed]
        if unknown:
            raise ParseError("header has unknown columns: " + ", ".join(unknown), feed=feed, line=1)
        return cls(feed=feed, columns=cols)

    def bind(self, values: Sequence[str], line: int) -> RawRow:
        if len(values) != len(self.columns):
            raise ParseError(
                f"expected {len(self.columns)} fields, got {len(values)}",
                feed=self.feed,
                line=line,
            )
        return RawRow(line=line, values=dict(zip(self.columns, values, strict=True)))


def read_feed(lines: Iterable[str], feed: FeedName) -> Iterator[RawRow]:
    """Parse the header from ``lines`` and yield each bound data row.

    Blank lines are skipped; line numbers in errors are 1-based and count the
    header.
    """

    it = iter(lines)
    header_line = next(it, None)
    if header_line is None:
        raise ParseError("feed is empty", feed=feed)
    schema = FeedSchema.from_header(feed, parse_header(header_line))
    _logger.debug("feed %s header: %s", feed, ", ".join(schema.columns))

    for lineno, raw in enumerate(it, start=2):
        try:
            values = split_line(raw)
        except csv.Error as exc:
            raise ParseError(f"malformed line: {exc}", feed=feed, line=lineno) from exc
        if not values:
            continue
        yield schema.bind(values, lineno)


def open_feed(path: str | PathLike[str], feed: FeedName) -> Iterator[RawRow]:
    """Read a feed file (UTF-8) and yield bound rows."""

    p = Path(path)
    with p.open(encoding="utf-8", newline="") as f:
        yield from read_feed(f, feed)


__all__ = [
    "ACCOUNT_COLUMNS",
    "TRANSACTION_COLUMNS",
    "TRANSACTION_OPTIONAL_COLUMNS",
    "FeedSchema",
    "RawRow",
    "open_feed",
    "parse_header",
    "read_feed",
    "split_line",
]
