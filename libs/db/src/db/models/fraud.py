from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: fm_state_names
# ---------------------------


class FmStateName(Base):
    __tablename__ = "fm_state_names"

    code: Mapped[str] = mapped_column(String(2), primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)


# ---------------------------
# Core: fm_accounts
# ---------------------------


class FmAccount(Base):
    __tablename__ = "fm_accounts"

    account_number: Mapped[str] = mapped_column(String, primary_key=True)
    last_name: Mapped[str | None] = mapped_column(String, nullable=True)
    first_name: Mapped[str | None] = mapped_column(String, nullable=True)
    street_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    # Full region name (e.g. "Texas"), not the feed's two-letter code.
    state: Mapped[str | None] = mapped_column(String, nullable=True)
    zip: Mapped[str | None] = mapped_column(String, nullable=True)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    ssn: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    mobile_number: Mapped[str | None] = mapped_column(String, nullable=True)


# ---------------------------
# Core: fm_transactions
# ---------------------------


class FmTransaction(Base):
    __tablename__ = "fm_transactions"

    transaction_number: Mapped[str] = mapped_column(String, primary_key=True)
    account_number: Mapped[str] = mapped_column(
        String, ForeignKey("fm_accounts.account_number"), nullable=False, index=True
    )
    transaction_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    # Positive for charges against the account, negative for credits/refunds.
    transaction_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    post_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    merchant_number: Mapped[str] = mapped_column(String, nullable=False)
    merchant_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Derived from merchant_description by the ingest heuristic.
    merchant_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    merchant_state: Mapped[str | None] = mapped_column(String, nullable=True)
    transaction_state: Mapped[str | None] = mapped_column(String, nullable=True)
    merchant_category_code: Mapped[str | None] = mapped_column(String, nullable=True)


__all__ = [
    "Base",
    "FmAccount",
    "FmStateName",
    "FmTransaction",
]
