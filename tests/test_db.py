from decimal import Decimal

from utils.db import init_sqlite, make_journal, read_payments


def test_journal_roundtrip(tmp_path):
    path = str(tmp_path / "payments.db")
    init_sqlite(path)
    journal = make_journal(path)

    journal({
        "ts": "2026-10-19T08:30:00+00:00", "user_id": 7, "exchange": "binance",
        "fiat_amount": Decimal("2570000"), "expected_amount": Decimal("100.00"),
        "matched_amount": Decimal("99.5"), "status": "matched", "attempts": 1,
    })
    journal({
        "ts": "2026-10-19T08:40:00+00:00", "user_id": 7, "exchange": "gate",
        "fiat_amount": Decimal("100"), "expected_amount": Decimal("0.01"),
        "matched_amount": None, "status": "timed_out", "attempts": 36,
    })

    rows = read_payments(path)
    assert [r["status"] for r in rows] == ["matched", "timed_out"]
    assert rows[0]["expected_amount"] == "100.00"
    assert rows[1]["matched_amount"] is None
    assert rows[1]["attempts"] == 36


def test_journal_failure_is_swallowed(tmp_path):
    # таблица не создана: ошибка логируется, исключение не вылетает
    journal = make_journal(str(tmp_path / "missing.db"))
    journal({"status": "matched"})
