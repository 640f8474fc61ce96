from datetime import datetime
from decimal import Decimal

import pytest
import pytz

from payments.ledger import BalanceLedger
from fakes import EXCHANGES


@pytest.fixture
def ledger():
    return BalanceLedger({}, EXCHANGES)


def test_empty_ledger_has_nothing_to_report(ledger):
    assert ledger.aggregate() is None


def test_reset_then_aggregate_reports_nothing(ledger):
    ledger.record("binance", Decimal("5"))
    ledger.reset()
    assert ledger.aggregate() is None
    for name in EXCHANGES:
        assert ledger.total_for(name).total == Decimal("0")
        assert ledger.total_for(name).transactions == []


def test_zero_amount_entry_is_reported(ledger):
    ledger.record("binance", Decimal("0"))
    summary = ledger.aggregate()
    assert summary is not None
    assert summary.total == Decimal("0")
    assert len(summary.transactions) == 1


def test_record_accumulates_per_exchange(ledger):
    ledger.record("binance", Decimal("99.5"), Decimal("2570000"))
    ledger.record("binance", Decimal("10.25"))
    ledger.record("gate", Decimal("1"))

    b = ledger.total_for("binance")
    assert b.total == Decimal("109.75")
    assert [tx["amount"] for tx in b.transactions] == [Decimal("99.5"), Decimal("10.25")]
    assert b.transactions[0]["fiat_amount"] == Decimal("2570000")
    assert ledger.total_for("bybit").total == Decimal("0")


def test_aggregate_sums_and_concatenates_in_exchange_order(ledger):
    ledger.record("gate", Decimal("3"))
    ledger.record("binance", Decimal("1"))
    ledger.record("binance", Decimal("2"))

    summary = ledger.aggregate()
    assert summary.total == Decimal("6")
    assert [tx["amount"] for tx in summary.transactions] == [Decimal("1"), Decimal("2"), Decimal("3")]


def test_per_exchange_skips_empty(ledger):
    ledger.record("bybit", Decimal("7"))
    assert list(ledger.per_exchange()) == ["bybit"]


def test_timestamp_is_taken_in_display_timezone():
    fixed = datetime(2026, 10, 19, 8, 30, tzinfo=pytz.utc).astimezone(pytz.timezone("Asia/Ho_Chi_Minh"))
    ledger = BalanceLedger({}, EXCHANGES, now=lambda: fixed)
    tx = ledger.record("binance", Decimal("1"))
    assert tx["timestamp"].hour == 15

    tx = BalanceLedger({}, EXCHANGES).record("binance", Decimal("1"))
    assert tx["timestamp"].utcoffset().total_seconds() == 7 * 3600


def test_record_unknown_exchange_raises(ledger):
    with pytest.raises(KeyError):
        ledger.record("kraken", Decimal("1"))
