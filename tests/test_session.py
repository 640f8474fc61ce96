from decimal import Decimal

import pytest

from payments.errors import ReentrancyViolation, ValidationError


def test_new_session_is_idle(session):
    assert session.selected_exchange is None
    assert not session.frozen
    assert session.conversion_rate == Decimal("25700")
    assert session.language == "en"


def test_select_exchange(session, user_data):
    session.select_exchange("bybit")
    assert session.selected_exchange == "bybit"
    assert user_data["selected_exchange"] == "bybit"


def test_select_unknown_exchange_is_rejected(session):
    with pytest.raises(ValidationError):
        session.select_exchange("kraken")
    assert session.selected_exchange is None


def test_select_exchange_while_frozen_is_rejected(session):
    session.select_exchange("binance")
    session.freeze()
    with pytest.raises(ReentrancyViolation):
        session.select_exchange("gate")
    assert session.selected_exchange == "binance"


def test_second_freeze_is_rejected_without_touching_first(session):
    token = session.freeze()
    with pytest.raises(ReentrancyViolation):
        session.freeze()
    assert session.is_frozen_by(token)


def test_unfreeze_with_stale_token_is_noop(session):
    old = session.freeze()
    session.clear()
    session.select_exchange("gate")
    new = session.freeze()

    assert session.unfreeze(old) is False
    assert session.is_frozen_by(new)
    assert session.selected_exchange == "gate"

    assert session.unfreeze(new) is True
    assert not session.frozen
    assert session.selected_exchange is None


def test_clear_cancels_running_session(session):
    session.select_exchange("binance")
    token = session.freeze()
    session.clear()
    assert not session.is_frozen_by(token)
    assert not session.frozen
    assert session.selected_exchange is None


def test_set_rate(session):
    assert session.set_rate("26000") == Decimal("26000.00")
    assert session.conversion_rate == Decimal("26000")


def test_set_rate_rounds_to_cents(session):
    assert session.set_rate("25700.555") == Decimal("25700.56")


@pytest.mark.parametrize("bad", ["abc", "0", "-10", "", "nan", "inf", "0.001", "1e40"])
def test_set_rate_rejects_invalid(session, bad):
    with pytest.raises(ValidationError):
        session.set_rate(bad)
    assert session.conversion_rate == Decimal("25700")


def test_set_rate_while_frozen_is_rejected(session):
    session.freeze()
    with pytest.raises(ReentrancyViolation):
        session.set_rate("30000")
    assert session.conversion_rate == Decimal("25700")


def test_language(session, user_data):
    session.language = "vi"
    assert user_data["lang"] == "vi"
    assert session.language == "vi"


def test_ledger_lives_in_session_data(session, user_data):
    session.ledger.record("binance", Decimal("10"))
    assert user_data["balances"]["binance"]["total"] == Decimal("10")
    assert session.ledger.total_for("binance").total == Decimal("10")
