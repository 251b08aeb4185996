"""Fraud rule engine over the joined account/transaction stream.

Rule 1 (amount anomaly) flags a charge that exceeds both a minimum amount and
``threshold_multiplier`` times the merchant's EMA of prior unflagged charges.
It reads and updates a :class:`MerchantAggregateStore`, so rows must arrive in
a fixed, reproducible order.

Rule 2 (geographic mismatch) is stateless: it flags every row whose
transaction region differs from the account holder's home region, regardless
of the amount or of rule 1's outcome.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .aggregates import MerchantAggregateStore
from .findings import AmountFinding, FindingSink, GeographicFinding
from .logging_setup import get_logger
from .models import AccountRecord, TransactionRecord

_logger = get_logger("fraud_monitor.rules")

_ENV_MIN_THRESHOLD = "FRAUD_MONITOR_MIN_TRANSACTION_THRESHOLD"
_ENV_MULTIPLIER = "FRAUD_MONITOR_THRESHOLD_MULTIPLIER"


class FraudRuleConfig(BaseModel):
    """Tunables for rule 1.

    Charges at or below ``min_transaction_threshold`` are never flagged, which
    keeps small purchases at low-EMA merchants from tripping the multiplier.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_transaction_threshold: Decimal = Field(default=Decimal("100.00"), gt=0)
    threshold_multiplier: Decimal = Field(default=Decimal("30.0"), gt=0)

    @classmethod
    def from_env(cls) -> FraudRuleConfig:
        """Build from ``FRAUD_MONITOR_*`` environment variables, when set."""

        values: dict[str, str] = {}
        if raw := os.getenv(_ENV_MIN_THRESHOLD):
            values["min_transaction_threshold"] = raw
        if raw := os.getenv(_ENV_MULTIPLIER):
            values["threshold_multiplier"] = raw
        return cls.model_validate(values)


class FraudRuleEngine:
    """Apply both rules to joined rows, in the order given.

    Each engine owns its aggregate store unless one is passed in; a fresh
    engine always starts with no merchant history.
    """

    def __init__(
        self,
        config: FraudRuleConfig | None = None,
        store: MerchantAggregateStore | None = None,
    ) -> None:
        self.config = config or FraudRuleConfig()
        self.store = store if store is not None else MerchantAggregateStore()

    def check_amount(
        self, account: AccountRecord, transaction: TransactionRecord
    ) -> AmountFinding | None:
        amount = transaction.transaction_amount
        if amount <= 0:
            return None

        merchant = transaction.merchant_number
        obs = self.store.observe(merchant, amount)
        if obs.is_seed:
            # Nothing to compare the first charge at a merchant against.
            self.store.commit(merchant, amount)
            return None

        cfg = self.config
        flagged = (
            amount > cfg.min_transaction_threshold
            and amount > cfg.threshold_multiplier * obs.current_ema
        )
        if not flagged:
            self.store.commit(merchant, amount)
            return None

        _logger.debug(
            "amount anomaly: txn=%s merchant=%s amount=%s ema=%s",
            transaction.transaction_number,
            merchant,
            amount,
            obs.current_ema,
        )
        return AmountFinding(
            name=account.display_name,
            account_number=account.account_number,
            transaction_number=transaction.transaction_number,
            merchant_name=transaction.merchant_name,
            amount=amount,
        )

    def check_geography(
        self, account: AccountRecord, transaction: TransactionRecord
    ) -> GeographicFinding | None:
        if account.state == transaction.transaction_state:
            return None
        return GeographicFinding(
            name=account.display_name,
            account_number=account.account_number,
            transaction_number=transaction.transaction_number,
            expected_location=account.state,
            actual_location=transaction.transaction_state,
        )

    def evaluate(
        self, account: AccountRecord, transaction: TransactionRecord, sink: FindingSink
    ) -> None:
        """Apply rule 1 then rule 2 to one joined row."""

        amount_finding = self.check_amount(account, transaction)
        if amount_finding is not None:
            sink.add(amount_finding)
        geo_finding = self.check_geography(account, transaction)
        if geo_finding is not None:
            sink.add(geo_finding)

    def run(self, rows: Iterable[tuple[AccountRecord, TransactionRecord]]) -> FindingSink:
        """Process ``rows`` once, top to bottom, and return the findings."""

        sink = FindingSink()
        n = 0
        for account, transaction in rows:
            self.evaluate(account, transaction, sink)
            n += 1
        _logger.info(
            "fraud check: rows=%d merchants=%d amount_findings=%d geographic_findings=%d",
            n,
            len(self.store),
            len(sink.amount),
            len(sink.geographic),
        )
        return sink


__all__ = ["FraudRuleConfig", "FraudRuleEngine"]
