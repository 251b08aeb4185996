"""Feed-specific field normalization into canonical records.

Canonical forms:

- ``MM/DD/YYYY`` dates (account ``dob``) -> ``YYYY-MM-DD``
- ``MMDDYYYY`` dates (transaction ``post_date``) -> ``YYYY-MM-DD``
- ``MMDDYYYY HH:MM:SS`` datetimes -> ``YYYY-MM-DD HH:MM:SS``
- trailing-sign amounts (``"12.34-"``) -> leading sign (``"-12.34"``); the
  transaction amount is then inverted so charges are positive and
  credits/refunds negative.
- two-letter region codes -> full region names.

Fixed-width fields are validated by length first; a value of the wrong width
is rejected rather than sliced. Any failure raises :class:`ParseError` with
feed, line and column context, and aborts the ingestion run.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from .errors import ParseError
from .logging_setup import get_logger
from .models import AccountRecord, FeedName, MerchantDescription, TransactionRecord
from .reader import RawRow
from .regions import RegionTable

_logger = get_logger("fraud_monitor.normalizers")

_TRAILING_SIGN_RE = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)([+-])$")

# Matches the scale of the stored amount column; finer amounts would be rounded.
_AMOUNT_PLACES = 2

# Tokens that end the merchant name when extending it.
_NAME_STOP_CHARS = ("<", "#", "\t")

# ---------------------------------------------------------------------------
# Field helpers (dates, amounts, quoting)
# ---------------------------------------------------------------------------


def slash_date_to_iso(value: str) -> str:
    """``"07/04/1985"`` -> ``"1985-07-04"``."""

    if len(value) != 10 or value[2] != "/" or value[5] != "/":
        raise ParseError("expected a MM/DD/YYYY date", value=value)
    try:
        return datetime.strptime(value, "%m/%d/%Y").date().isoformat()
    except ValueError as exc:
        raise ParseError("invalid calendar date", value=value) from exc


def compact_date_to_iso(value: str) -> str:
    """``"07041985"`` -> ``"1985-07-04"``."""

    if len(value) != 8 or not value.isdigit():
        raise ParseError("expected a MMDDYYYY date", value=value)
    try:
        return datetime.strptime(value, "%m%d%Y").date().isoformat()
    except ValueError as exc:
        raise ParseError("invalid calendar date", value=value) from exc


def compact_datetime_to_iso(value: str) -> str:
    """``"07041985 13:05:09"`` -> ``"1985-07-04 13:05:09"``."""

    if len(value) != 17 or value[8] != " ":
        raise ParseError("expected a MMDDYYYY HH:MM:SS datetime", value=value)
    day, clock = value[:8], value[9:]
    try:
        iso_day = compact_date_to_iso(day)
    except ParseError as exc:
        raise ParseError(exc.reason, value=value) from exc
    try:
        datetime.strptime(clock, "%H:%M:%S")
    except ValueError as exc:
        raise ParseError("invalid time of day", value=value) from exc
    return f"{iso_day} {clock}"


def trailing_sign_to_leading(value: str) -> str:
    """``"12.34-"`` -> ``"-12.34"``; ``"12.34+"`` -> ``"12.34"``."""

    m = _TRAILING_SIGN_RE.match(value)
    if m is None:
        raise ParseError("expected digits followed by a sign character", value=value)
    digits, sign = m.groups()
    return f"-{digits}" if sign == "-" else digits


def normalize_transaction_amount(value: str) -> Decimal:
    """Parse a trailing-sign feed amount and flip it to the account's view.

    The feed reports amounts from the card issuer's ledger, where a charge is a
    debit (``"25.00-"``). Flipping makes charges positive and refunds negative.
    """

    leading = trailing_sign_to_leading(value)
    _, _, fraction = leading.partition(".")
    if len(fraction) > _AMOUNT_PLACES:
        raise ParseError(f"more than {_AMOUNT_PLACES} decimal places", value=value)
    try:
        amount = Decimal(leading)
    except InvalidOperation as exc:
        raise ParseError("invalid amount", value=value) from exc
    return -amount


def escape_quotes(text: str) -> str:
    """Backslash-escape every single quote."""

    return text.replace("'", "\\'")


# ---------------------------------------------------------------------------
# Merchant description heuristic
# ---------------------------------------------------------------------------


def parse_merchant_description(text: str | None, regions: RegionTable) -> MerchantDescription:
    """Best-effort extraction of merchant name and region from free text.

    Descriptions look like ``"JOES PIZZA #123 AUSTIN TXUS"`` or
    ``"JOES PIZZA\\tAUSTIN TX"``. The rules are deliberately simple and lossy:

    1. If the text contains a tab, the name is everything before the first tab.
    2. Otherwise the name starts as the first space-separated token. With more
       than two tokens it is extended with further non-blank tokens until one
       contains ``<``, ``#`` or a tab, or until only the last two non-blank
       tokens (city and region) remain.
    3. The region code is the final token, cut to its first two characters
       when longer. An unknown code leaves ``state`` as ``None``.

    ``text`` is expected to be quote-escaped already (see :func:`escape_quotes`).
    """

    if not text:
        return MerchantDescription(name=None, state_code=None, state=None)

    tokens = text.split(" ")
    tab = text.find("\t")
    if tab != -1:
        name = text[:tab]
    else:
        name = tokens[0]
        if len(tokens) > 2:
            tokens = [t.strip() for t in tokens]
            num_nonempty = sum(1 for t in tokens if t)
            consumed = 1
            i = 1
            while consumed < num_nonempty - 2 and i < len(tokens):
                token = tokens[i]
                i += 1
                if not token:
                    continue
                consumed += 1
                if any(ch in token for ch in _NAME_STOP_CHARS):
                    break
                name += " " + token

    last = tokens[-1]
    state_code = last[:2] if len(last) > 2 else last
    state = regions.resolve(state_code)
    if state is None:
        _logger.debug("merchant region %r not resolved from %r", state_code, text)
    return MerchantDescription(name=name or None, state_code=state_code or None, state=state)


# ---------------------------------------------------------------------------
# Row normalizers
# ---------------------------------------------------------------------------


def _resolve_region(value: str, regions: RegionTable) -> str:
    if regions.is_name(value):
        return value
    name = regions.resolve(value)
    if name is None:
        raise ParseError("unknown region code", value=value)
    return name


def _optional(row: RawRow, column: str) -> str | None:
    raw = row.values.get(column)
    return raw if raw else None


def _required(row: RawRow, feed: FeedName, column: str) -> str:
    raw = _optional(row, column)
    if raw is None:
        raise ParseError("required field is empty", feed=feed, line=row.line, column=column)
    return raw


def _apply[T](row: RawRow, feed: FeedName, column: str, raw: str, fn: Callable[[str], T]) -> T:
    try:
        return fn(raw)
    except ParseError as exc:
        raise exc.with_context(feed=feed, line=row.line, column=column) from exc


def _convert[T](row: RawRow, feed: FeedName, column: str, fn: Callable[[str], T]) -> T | None:
    raw = _optional(row, column)
    if raw is None:
        return None
    return _apply(row, feed, column, raw, fn)


def _convert_required[T](
    row: RawRow, feed: FeedName, column: str, fn: Callable[[str], T]
) -> T:
    return _apply(row, feed, column, _required(row, feed, column), fn)


def normalize_account(row: RawRow, regions: RegionTable) -> AccountRecord:
    """Normalize one bound account-feed row."""

    feed: FeedName = "accounts"
    return AccountRecord(
        account_number=_required(row, feed, "account_number"),
        last_name=_optional(row, "last_name"),
        first_name=_optional(row, "first_name"),
        street_address=_optional(row, "street_address"),
        unit=_optional(row, "unit"),
        city=_optional(row, "city"),
        state=_convert(row, feed, "state", lambda v: _resolve_region(v, regions)),
        zip=_optional(row, "zip"),
        dob=_convert(row, feed, "dob", lambda v: date.fromisoformat(slash_date_to_iso(v))),
        ssn=_optional(row, "ssn"),
        email=_optional(row, "email_address"),
        mobile_number=_optional(row, "mobile_number"),
    )


def normalize_transaction(row: RawRow, regions: RegionTable) -> TransactionRecord:
    """Normalize one bound transaction-feed row.

    ``merchant_name`` and ``merchant_state`` are always derived from the
    description. ``transaction_state`` comes from the feed column when the
    feed carries a non-empty one, otherwise it is the derived merchant state.
    """

    feed: FeedName = "transactions"
    txn_dt = _convert_required(
        row,
        feed,
        "transaction_datetime",
        lambda v: datetime.fromisoformat(compact_datetime_to_iso(v)),
    )
    amount = _convert_required(row, feed, "transaction_amount", normalize_transaction_amount)

    raw_description = _optional(row, "merchant_description")
    description = escape_quotes(raw_description) if raw_description is not None else None
    merchant = parse_merchant_description(description, regions)

    txn_state = _convert(row, feed, "transaction_state", lambda v: _resolve_region(v, regions))
    if txn_state is None:
        txn_state = merchant.state

    return TransactionRecord(
        transaction_number=_required(row, feed, "transaction_number"),
        account_number=_required(row, feed, "account_number"),
        transaction_datetime=txn_dt,
        transaction_amount=amount,
        merchant_number=_required(row, feed, "merchant_number"),
        post_date=_convert(
            row, feed, "post_date", lambda v: date.fromisoformat(compact_date_to_iso(v))
        ),
        merchant_description=description,
        merchant_name=merchant.name,
        merchant_state=merchant.state,
        transaction_state=txn_state,
        merchant_category_code=_optional(row, "merchant_category_code"),
    )


__all__ = [
    "compact_date_to_iso",
    "compact_datetime_to_iso",
    "escape_quotes",
    "normalize_account",
    "normalize_transaction",
    "normalize_transaction_amount",
    "parse_merchant_description",
    "slash_date_to_iso",
    "trailing_sign_to_leading",
]
