from decimal import Decimal

import pytest

from fraud_monitor.aggregates import MerchantAggregateStore, Observation


def _q(d: Decimal) -> Decimal:
    return d.quantize(Decimal("0.01"))


def test_first_observation_is_seed():
    store = MerchantAggregateStore()
    obs = store.observe("M1", Decimal("10"))
    assert obs == Observation(is_seed=True, current_ema=Decimal(0))
    assert store.commit("M1", Decimal("10")) == Decimal("10")
    agg = store.get("M1")
    assert agg is not None
    assert (agg.transaction_count, agg.ema) == (1, Decimal("10"))


def test_observe_returns_ema_before_the_charge():
    store = MerchantAggregateStore()
    store.observe("M1", Decimal("10"))
    store.commit("M1", Decimal("10"))

    obs = store.observe("M1", Decimal("40"))
    assert obs.is_seed is False
    assert obs.current_ema == Decimal("10")

    # alpha = 2 / (2 + 1); ema = 2/3 * 40 + 1/3 * 10 = 30
    assert _q(store.commit("M1", Decimal("40"))) == Decimal("30.00")


def test_uncommitted_observation_still_counts():
    store = MerchantAggregateStore()
    store.observe("M1", Decimal("10"))
    store.commit("M1", Decimal("10"))
    store.observe("M1", Decimal("500"))  # caller flagged it; no commit

    agg = store.get("M1")
    assert agg is not None
    assert agg.transaction_count == 2
    assert agg.ema == Decimal("10")

    # Third charge uses alpha = 2 / (3 + 1).
    store.observe("M1", Decimal("30"))
    assert _q(store.commit("M1", Decimal("30"))) == Decimal("20.00")


def test_merchants_are_independent():
    store = MerchantAggregateStore()
    store.observe("M1", Decimal("10"))
    store.commit("M1", Decimal("10"))
    assert store.observe("M2", Decimal("99")).is_seed
    assert len(store) == 2
    assert "M2" in store
    assert "M3" not in store


def test_refund_amounts_are_rejected():
    store = MerchantAggregateStore()
    with pytest.raises(ValueError):
        store.observe("M1", Decimal("-5"))
    with pytest.raises(ValueError):
        store.observe("M1", Decimal("0"))
    assert len(store) == 0


def test_commit_without_observe():
    with pytest.raises(KeyError):
        MerchantAggregateStore().commit("M1", Decimal("1"))


def test_get_returns_a_snapshot():
    store = MerchantAggregateStore()
    store.observe("M1", Decimal("10"))
    store.commit("M1", Decimal("10"))
    snap = store.get("M1")
    assert snap is not None
    snap.ema = Decimal("999")
    assert store.get("M1").ema == Decimal("10")
    assert store.get("unknown") is None
