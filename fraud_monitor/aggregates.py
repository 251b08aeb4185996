"""Per-merchant transaction count and exponential moving average (EMA).

The store is updated in processing order and is therefore order-sensitive:
feeding the same charges in a different order yields a different EMA history.
Callers follow a two-step protocol per charge:

1. :meth:`MerchantAggregateStore.observe` bumps the merchant's count and
   returns the EMA *before* this charge;
2. :meth:`MerchantAggregateStore.commit` folds the charge into the EMA, and is
   only called for seeds and for charges the caller did not flag.

Refunds (amount <= 0) never reach the store.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import NamedTuple

_TWO = Decimal(2)
_ONE = Decimal(1)


@dataclass(slots=True)
class MerchantAggregate:
    merchant_number: str
    transaction_count: int = 0
    ema: Decimal = Decimal(0)


class Observation(NamedTuple):
    is_seed: bool
    current_ema: Decimal


class MerchantAggregateStore:
    """In-memory aggregates keyed by merchant number.

    Merchant numbers are interned to dense integer ids on first sight; the
    aggregates themselves live in a list indexed by that id.
    """

    def __init__(self) -> None:
        self._ids: dict[str, int] = {}
        self._aggregates: list[MerchantAggregate] = []

    def _lookup(self, merchant_number: str) -> MerchantAggregate | None:
        idx = self._ids.get(merchant_number)
        return None if idx is None else self._aggregates[idx]

    def observe(self, merchant_number: str, amount: Decimal) -> Observation:
        """Count one charge at ``merchant_number`` and report the prior EMA."""

        if amount <= 0:
            raise ValueError(f"refunds do not participate in merchant aggregates: {amount}")
        agg = self._lookup(merchant_number)
        if agg is None:
            self._ids[merchant_number] = len(self._aggregates)
            agg = MerchantAggregate(merchant_number=merchant_number)
            self._aggregates.append(agg)
        agg.transaction_count += 1
        return Observation(is_seed=agg.transaction_count == 1, current_ema=agg.ema)

    def commit(self, merchant_number: str, amount: Decimal) -> Decimal:
        """Fold ``amount`` into the merchant's EMA and return the new value.

        ``alpha = 2 / (transaction_count + 1)`` using the count from the
        preceding :meth:`observe`; for a seed alpha is 1, so the EMA becomes
        the seed amount.
        """

        agg = self._lookup(merchant_number)
        if agg is None or agg.transaction_count == 0:
            raise KeyError(merchant_number)
        alpha = _TWO / (agg.transaction_count + 1)
        agg.ema = alpha * amount + (_ONE - alpha) * agg.ema
        return agg.ema

    def get(self, merchant_number: str) -> MerchantAggregate | None:
        """Snapshot of a merchant's aggregate, or ``None`` if never observed."""

        agg = self._lookup(merchant_number)
        return None if agg is None else replace(agg)

    def __contains__(self, merchant_number: object) -> bool:
        return merchant_number in self._ids

    def __len__(self) -> int:
        return len(self._aggregates)


__all__ = ["MerchantAggregate", "MerchantAggregateStore", "Observation"]
