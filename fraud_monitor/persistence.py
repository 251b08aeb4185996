# ruff: noqa: I001
"""Persistence integration for fraud_monitor.

Functions here write normalized feed records to the shared database owned by
``libs/db`` and read back the ordered account/transaction join the rule engine
consumes. They rely on SQLAlchemy ORM models defined in ``db.models.fraud``
and a session provided by ``db.client``.

Every SQLAlchemy failure is re-raised as :class:`StorageError`; the session's
owner (normally ``db.client.session_scope``) is responsible for rollback.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import asdict
from typing import Literal

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.client import create_schema, session_scope
from db.models.fraud import FmAccount, FmStateName, FmTransaction
from .errors import StorageError
from .logging_setup import get_logger
from .models import AccountRecord, TransactionRecord
from .regions import RegionTable

_logger = get_logger("fraud_monitor.persistence")

type TableName = Literal["accounts", "transactions"]

_TABLES: dict[str, type[FmAccount] | type[FmTransaction]] = {
    "accounts": FmAccount,
    "transactions": FmTransaction,
}


def ensure_schema(*, database_url: str | None = None) -> None:
    """Create the feed and reference tables when missing."""

    try:
        create_schema(database_url=database_url)
    except SQLAlchemyError as exc:
        raise StorageError(f"creating schema failed: {exc}") from exc


@contextmanager
def storage_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """``session_scope`` with connect/commit failures surfaced as :class:`StorageError`."""

    try:
        with session_scope(database_url=database_url) as session:
            yield session
    except SQLAlchemyError as exc:
        raise StorageError(f"database transaction failed: {exc}") from exc


def _to_row(
    table: TableName, record: AccountRecord | TransactionRecord
) -> FmAccount | FmTransaction:
    try:
        model = _TABLES[table]
    except KeyError:
        raise ValueError(f"unknown table: {table!r}") from None
    return model(**asdict(record))


def upsert(session: Session, table: TableName, record: AccountRecord | TransactionRecord) -> None:
    """Insert or replace one record, keyed by its primary key."""

    row = _to_row(table, record)
    try:
        session.merge(row)
        session.flush()
    except SQLAlchemyError as exc:
        raise StorageError(f"upsert into {table} failed: {exc}") from exc


def upsert_many(
    session: Session,
    table: TableName,
    records: Iterable[AccountRecord | TransactionRecord],
) -> int:
    """Upsert ``records`` and flush once at the end. Returns the count."""

    n = 0
    try:
        for record in records:
            session.merge(_to_row(table, record))
            n += 1
        session.flush()
    except SQLAlchemyError as exc:
        raise StorageError(f"upsert into {table} failed after {n} rows: {exc}") from exc
    _logger.debug("upserted %d rows into %s", n, table)
    return n


def clear_feeds(session: Session) -> None:
    """Delete all transactions and accounts (children first)."""

    try:
        session.execute(delete(FmTransaction))
        session.execute(delete(FmAccount))
        session.flush()
    except SQLAlchemyError as exc:
        raise StorageError(f"clearing feed tables failed: {exc}") from exc


def _account_from_row(row: FmAccount) -> AccountRecord:
    return AccountRecord(
        account_number=row.account_number,
        last_name=row.last_name,
        first_name=row.first_name,
        street_address=row.street_address,
        unit=row.unit,
        city=row.city,
        state=row.state,
        zip=row.zip,
        dob=row.dob,
        ssn=row.ssn,
        email=row.email,
        mobile_number=row.mobile_number,
    )


def _transaction_from_row(row: FmTransaction) -> TransactionRecord:
    return TransactionRecord(
        transaction_number=row.transaction_number,
        account_number=row.account_number,
        transaction_datetime=row.transaction_datetime,
        transaction_amount=row.transaction_amount,
        merchant_number=row.merchant_number,
        post_date=row.post_date,
        merchant_description=row.merchant_description,
        merchant_name=row.merchant_name,
        merchant_state=row.merchant_state,
        transaction_state=row.transaction_state,
        merchant_category_code=row.merchant_category_code,
    )


def query_joined_ordered(session: Session) -> list[tuple[AccountRecord, TransactionRecord]]:
    """Return every (account, transaction) pair of the inner join.

    Ordered by ``transaction_number`` then ``account_number`` so repeated
    calls over the same data always yield the same sequence, which the
    order-sensitive amount rule depends on. The result is fully materialized
    before returning so a read failure never leaves a partial stream.
    """

    stmt = (
        select(FmAccount, FmTransaction)
        .join(FmTransaction, FmTransaction.account_number == FmAccount.account_number)
        .order_by(FmTransaction.transaction_number, FmAccount.account_number)
    )
    try:
        rows = session.execute(stmt).all()
    except SQLAlchemyError as exc:
        raise StorageError(f"joined account/transaction query failed: {exc}") from exc
    return [(_account_from_row(a), _transaction_from_row(t)) for a, t in rows]


def load_region_table(session: Session) -> RegionTable | None:
    """Build a :class:`RegionTable` from ``fm_state_names``; ``None`` if empty."""

    try:
        rows = session.execute(select(FmStateName.code, FmStateName.name)).all()
    except SQLAlchemyError as exc:
        raise StorageError(f"loading state names failed: {exc}") from exc
    if not rows:
        return None
    return RegionTable.from_rows((code, name) for code, name in rows)


def seed_state_names(session: Session, regions: RegionTable) -> int:
    """Upsert every code/name pair of ``regions`` into ``fm_state_names``."""

    n = 0
    try:
        for code, name in regions.items():
            session.merge(FmStateName(code=code, name=name))
            n += 1
        session.flush()
    except SQLAlchemyError as exc:
        raise StorageError(f"seeding state names failed: {exc}") from exc
    return n


__all__ = [
    "TableName",
    "clear_feeds",
    "ensure_schema",
    "load_region_table",
    "query_joined_ordered",
    "seed_state_names",
    "storage_scope",
    "upsert",
    "upsert_many",
]
