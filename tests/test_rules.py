from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from fraud_monitor.aggregates import MerchantAggregateStore
from fraud_monitor.findings import AmountFinding, FindingSink, GeographicFinding
from fraud_monitor.models import AccountRecord, TransactionRecord
from fraud_monitor.rules import FraudRuleConfig, FraudRuleEngine


def _account(number: str = "1001", state: str | None = "California") -> AccountRecord:
    return AccountRecord(account_number=number, first_name="Jane", last_name="Doe", state=state)


def _txn(
    number: str,
    amount: str,
    *,
    merchant: str = "M1",
    state: str | None = "California",
    account: str = "1001",
) -> TransactionRecord:
    return TransactionRecord(
        transaction_number=number,
        account_number=account,
        transaction_datetime=datetime(2021, 1, 15, 10, 0, 0),
        transaction_amount=Decimal(amount),
        merchant_number=merchant,
        merchant_name="JOES PIZZA",
        merchant_state=state,
        transaction_state=state,
    )


def _run(amounts: list[str], **kwargs) -> FindingSink:
    acct = _account()
    rows = [(acct, _txn(f"T{i}", a, **kwargs)) for i, a in enumerate(amounts)]
    return FraudRuleEngine().run(rows)


# ---------------------------------------------------------------------------
# Rule 1: amount anomaly
# ---------------------------------------------------------------------------


def test_flags_charge_above_multiplier_times_ema():
    # ema = 10 after the seed; 301 > 100 and 301 > 30 * 10
    sink = _run(["10.00", "301.00"])
    assert sink.amount == [
        AmountFinding(
            name="Jane Doe",
            account_number="1001",
            transaction_number="T1",
            merchant_name="JOES PIZZA",
            amount=Decimal("301.00"),
        )
    ]
    assert sink.geographic == []


def test_does_not_flag_below_multiplier_times_ema():
    # 299 exceeds the minimum threshold but not 30 * 10
    assert _run(["10.00", "299.00"]).amount == []


def test_does_not_flag_at_or_below_minimum_threshold():
    # 99 is far above 30 * 1 but not above the 100.00 floor
    assert _run(["1.00", "99.00"]).amount == []
    assert _run(["1.00", "100.00"]).amount == []


def test_first_charge_at_merchant_is_never_flagged():
    engine = FraudRuleEngine()
    sink = engine.run([(_account(), _txn("T0", "1000000.00"))])
    assert sink.amount == []
    agg = engine.store.get("M1")
    assert agg is not None
    assert (agg.transaction_count, agg.ema) == (1, Decimal("1000000.00"))


def test_flagged_charge_is_excluded_from_ema():
    engine = FraudRuleEngine()
    acct = _account()
    engine.run([(acct, _txn("T0", "10.00")), (acct, _txn("T1", "5000.00"))])
    agg = engine.store.get("M1")
    assert agg is not None
    assert agg.transaction_count == 2
    assert agg.ema == Decimal("10.00")


def test_unflagged_charge_folds_into_ema():
    engine = FraudRuleEngine()
    acct = _account()
    engine.run([(acct, _txn("T0", "10.00")), (acct, _txn("T1", "40.00"))])
    agg = engine.store.get("M1")
    assert agg is not None
    assert agg.ema.quantize(Decimal("0.01")) == Decimal("30.00")


@pytest.mark.parametrize("refund", ["-5000.00", "0.00"])
def test_refunds_never_touch_aggregates(refund):
    engine = FraudRuleEngine()
    acct = _account()
    sink = engine.run([(acct, _txn("T0", "10.00")), (acct, _txn("T1", refund))])
    assert sink.amount == []
    agg = engine.store.get("M1")
    assert agg is not None
    assert (agg.transaction_count, agg.ema) == (1, Decimal("10.00"))


def test_refund_first_does_not_seed():
    engine = FraudRuleEngine()
    engine.run([(_account(), _txn("T0", "-20.00"))])
    assert len(engine.store) == 0


def test_results_depend_on_processing_order():
    assert len(_run(["10.00", "400.00"]).amount) == 1
    assert _run(["400.00", "10.00"]).amount == []


def test_merchant_history_is_per_merchant():
    acct = _account()
    sink = FraudRuleEngine().run(
        [
            (acct, _txn("T0", "10.00", merchant="M1")),
            (acct, _txn("T1", "500.00", merchant="M2")),  # seed at M2
        ]
    )
    assert sink.amount == []


def test_config_changes_thresholds():
    cfg = FraudRuleConfig(min_transaction_threshold=Decimal("5"), threshold_multiplier=Decimal("2"))
    acct = _account()
    sink = FraudRuleEngine(cfg).run([(acct, _txn("T0", "10.00")), (acct, _txn("T1", "21.00"))])
    assert [f.transaction_number for f in sink.amount] == ["T1"]


def test_fresh_engines_do_not_share_state():
    acct = _account()
    FraudRuleEngine().run([(acct, _txn("T0", "10.00"))])
    # A new engine sees the big charge as a seed, not against the old history.
    assert FraudRuleEngine().run([(acct, _txn("T1", "5000.00"))]).amount == []


def test_engine_uses_injected_store():
    store = MerchantAggregateStore()
    FraudRuleEngine(store=store).run([(_account(), _txn("T0", "10.00"))])
    assert "M1" in store


# ---------------------------------------------------------------------------
# Rule 2: geographic mismatch
# ---------------------------------------------------------------------------


def test_geographic_mismatch_on_refund_is_independent_of_rule_1():
    sink = FraudRuleEngine().run([(_account(), _txn("T0", "-250.00", state="New York"))])
    assert sink.amount == []
    assert sink.geographic == [
        GeographicFinding(
            name="Jane Doe",
            account_number="1001",
            transaction_number="T0",
            expected_location="California",
            actual_location="New York",
        )
    ]


def test_both_rules_can_fire_on_one_row():
    acct = _account()
    sink = FraudRuleEngine().run(
        [(acct, _txn("T0", "10.00")), (acct, _txn("T1", "500.00", state="Nevada"))]
    )
    assert [f.transaction_number for f in sink.amount] == ["T1"]
    assert [f.transaction_number for f in sink.geographic] == ["T1"]
    assert len(sink) == 2


def test_unknown_transaction_region_is_a_mismatch():
    sink = FraudRuleEngine().run([(_account(), _txn("T0", "5.00", state=None))])
    assert [(f.expected_location, f.actual_location) for f in sink.geographic] == [
        ("California", None)
    ]


def test_findings_keep_row_order():
    acct = _account()
    rows = [(acct, _txn(f"T{i}", "5.00", state=s)) for i, s in enumerate(["Ohio", "Utah", "Iowa"])]
    sink = FraudRuleEngine().run(rows)
    assert [f.actual_location for f in sink.geographic] == ["Ohio", "Utah", "Iowa"]
    assert all(f.rule == "geographic" for f in sink.geographic)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def test_config_defaults():
    cfg = FraudRuleConfig()
    assert cfg.min_transaction_threshold == Decimal("100.00")
    assert cfg.threshold_multiplier == Decimal("30.0")


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("FRAUD_MONITOR_THRESHOLD_MULTIPLIER", "2.5")
    cfg = FraudRuleConfig.from_env()
    assert cfg.threshold_multiplier == Decimal("2.5")
    assert cfg.min_transaction_threshold == Decimal("100.00")


@pytest.mark.parametrize("field", ["min_transaction_threshold", "threshold_multiplier"])
def test_config_rejects_non_positive(field):
    with pytest.raises(ValidationError):
        FraudRuleConfig(**{field: Decimal("0")})


def test_config_is_frozen():
    cfg = FraudRuleConfig()
    with pytest.raises(ValidationError):
        cfg.threshold_multiplier = Decimal("1")
