"""Normalized record types for the two input feeds.

Records are created once per input row by :mod:`fraud_monitor.normalizers`
and are immutable afterwards. Absent values are ``None``; an empty string
never reaches a record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

type FeedName = Literal["accounts", "transactions"]

# ---------------------------------------------------------------------------
# Account feed
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AccountRecord:
    """One account holder, keyed by ``account_number``.

    ``state`` holds the full region name (e.g. ``"Texas"``), resolved from the
    two-letter code in the feed.
    """

    account_number: str
    last_name: str | None = None
    first_name: str | None = None
    street_address: str | None = None
    unit: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    dob: date | None = None
    ssn: str | None = None
    email: str | None = None
    mobile_number: str | None = None

    @property
    def display_name(self) -> str:
        """``"<first> <last>"`` as printed in fraud reports."""

        return " ".join(p for p in (self.first_name, self.last_name) if p)


# ---------------------------------------------------------------------------
# Transaction feed
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MerchantDescription:
    """Result of the merchant-description heuristic.

    ``state_code`` is the raw two-character code taken from the final token;
    ``state`` is its full name, or ``None`` when the code is not a known region.
    """

    name: str | None
    state_code: str | None
    state: str | None


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """One card transaction, keyed by ``transaction_number``.

    ``transaction_amount`` is positive for charges against the account and
    negative for credits/refunds.
    """

    transaction_number: str
    account_number: str
    transaction_datetime: datetime
    transaction_amount: Decimal
    merchant_number: str
    post_date: date | None = None
    merchant_description: str | None = None
    merchant_name: str | None = None
    merchant_state: str | None = None
    transaction_state: str | None = None
    merchant_category_code: str | None = None

    @property
    def is_refund(self) -> bool:
        return self.transaction_amount <= 0


__all__ = [
    "AccountRecord",
    "FeedName",
    "MerchantDescription",
    "TransactionRecord",
]
