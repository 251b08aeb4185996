"""Top-level operations: ingest the two feeds, run the fraud check, report.

A run is all-or-nothing. The first :class:`ParseError` or :class:`StorageError`
propagates out of :func:`run`, the surrounding ``session_scope`` rolls back
the partial load, and no report files are written.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from os import PathLike
from typing import NamedTuple

from sqlalchemy.orm import Session

from .errors import ParseError
from .findings import FindingSink
from .logging_setup import get_logger
from .models import AccountRecord, TransactionRecord
from .normalizers import normalize_account, normalize_transaction
from .persistence import (
    clear_feeds,
    ensure_schema,
    load_region_table,
    query_joined_ordered,
    storage_scope,
    upsert_many,
)
from .reader import RawRow, open_feed
from .regions import RegionTable
from .reports import write_reports
from .rules import FraudRuleConfig, FraudRuleEngine

_logger = get_logger("fraud_monitor.api")


class IngestSummary(NamedTuple):
    accounts: int
    transactions: int


def _unique_accounts(rows: Iterable[RawRow], regions: RegionTable) -> Iterator[AccountRecord]:
    seen: set[str] = set()
    for row in rows:
        record = normalize_account(row, regions)
        if record.account_number in seen:
            raise ParseError(
                "duplicate account_number",
                feed="accounts",
                line=row.line,
                column="account_number",
                value=record.account_number,
            )
        seen.add(record.account_number)
        yield record


def _unique_transactions(
    rows: Iterable[RawRow], regions: RegionTable
) -> Iterator[TransactionRecord]:
    seen: set[str] = set()
    for row in rows:
        record = normalize_transaction(row, regions)
        if record.transaction_number in seen:
            raise ParseError(
                "duplicate transaction_number",
                feed="transactions",
                line=row.line,
                column="transaction_number",
                value=record.transaction_number,
            )
        seen.add(record.transaction_number)
        yield record


def resolve_regions(session: Session, regions: RegionTable | None = None) -> RegionTable:
    """Explicit table, else ``fm_state_names``, else the built-in US list."""

    if regions is not None:
        return regions
    return load_region_table(session) or RegionTable.default()


def ingest_rows(
    session: Session,
    account_rows: Iterable[RawRow],
    transaction_rows: Iterable[RawRow],
    regions: RegionTable | None = None,
) -> IngestSummary:
    """Replace the stored feeds with the normalized ``*_rows``."""

    table = resolve_regions(session, regions)
    clear_feeds(session)
    n_accounts = upsert_many(session, "accounts", _unique_accounts(account_rows, table))
    n_txns = upsert_many(session, "transactions", _unique_transactions(transaction_rows, table))
    _logger.info("ingested accounts=%d transactions=%d", n_accounts, n_txns)
    return IngestSummary(accounts=n_accounts, transactions=n_txns)


def ingest_feeds(
    session: Session,
    accounts_path: str | PathLike[str],
    transactions_path: str | PathLike[str],
    regions: RegionTable | None = None,
) -> IngestSummary:
    """Read, normalize and store both feed files."""

    return ingest_rows(
        session,
        open_feed(accounts_path, "accounts"),
        open_feed(transactions_path, "transactions"),
        regions,
    )


def run_fraud_check(session: Session, config: FraudRuleConfig | None = None) -> FindingSink:
    """Evaluate both rules over the stored, ordered join with a fresh engine."""

    rows = query_joined_ordered(session)
    return FraudRuleEngine(config).run(rows)


def run(
    accounts_path: str | PathLike[str],
    transactions_path: str | PathLike[str],
    amount_report_path: str | PathLike[str],
    geographic_report_path: str | PathLike[str],
    *,
    database_url: str | None = None,
    config: FraudRuleConfig | None = None,
    regions: RegionTable | None = None,
) -> FindingSink:
    """Ingest both feeds, run the fraud check, then write both reports."""

    ensure_schema(database_url=database_url)
    with storage_scope(database_url=database_url) as session:
        ingest_feeds(session, accounts_path, transactions_path, regions)
        sink = run_fraud_check(session, config)
    write_reports(sink, amount_report_path, geographic_report_path)
    return sink


__all__ = [
    "IngestSummary",
    "ingest_feeds",
    "ingest_rows",
    "resolve_regions",
    "run",
    "run_fraud_check",
]
