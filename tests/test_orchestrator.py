import asyncio
from decimal import Decimal

import pytest

from payments.errors import ReentrancyViolation, ValidationError
from payments.orchestrator import PaymentOrchestrator, PaymentSettings
from payments.reconciler import PollingReconciler, PollingStatus
from fakes import FakeGateway, deposit


def make_orchestrator(clock, gateway, journal=None, assets_dir=None):
    reconciler = PollingReconciler({gateway.exchange_id: gateway}, clock=clock.monotonic,
                                   now_ms=clock.now_ms, sleep=clock.sleep)
    settings = PaymentSettings(max_duration_ms=15000, interval_ms=5000, lookback_ms=180000,
                               assets_dir=assets_dir)
    return PaymentOrchestrator(reconciler, settings, journal=journal)


def spawn(coro):
    return asyncio.ensure_future(coro)


async def test_end_to_end_match_records_matched_amount(clock, session, notifier):
    gw = FakeGateway("binance", responses=[[deposit("99.5")]])
    rows = []
    orch = make_orchestrator(clock, gw, journal=rows.append)

    session.select_exchange("binance")
    pending = orch.submit_amount(session, "2570000", notifier, spawn, user_id=42)

    assert pending.expected_amount == Decimal("100.00")
    assert session.frozen

    outcome = await pending.task

    assert outcome.status == PollingStatus.MATCHED
    summary = session.ledger.total_for("binance")
    assert summary.total == Decimal("99.5")
    assert summary.transactions[0]["fiat_amount"] == Decimal("2570000")
    assert not session.frozen
    assert session.selected_exchange is None
    assert notifier.keys() == ["entered_amount", "session_started", "balance_changed"]
    assert notifier.sent[-1][1]["difference"] == "99.50"

    assert rows[0]["status"] == "matched"
    assert rows[0]["user_id"] == 42
    assert rows[0]["matched_amount"] == Decimal("99.5")


async def test_timeout_unfreezes_without_ledger_entry(clock, session, notifier):
    gw = FakeGateway("binance", default=[deposit("1")])
    orch = make_orchestrator(clock, gw)

    session.select_exchange("binance")
    outcome = await orch.submit_amount(session, "2570000", notifier, spawn).task

    assert outcome.status == PollingStatus.TIMED_OUT
    assert session.ledger.aggregate() is None
    assert not session.frozen
    assert notifier.keys()[-1] == "session_cancelled"


async def test_second_submission_while_frozen_is_rejected(clock, session, notifier):
    gw = FakeGateway("binance", default=[])
    orch = make_orchestrator(clock, gw)

    session.select_exchange("binance")
    first = orch.submit_amount(session, "2570000", notifier, spawn)
    token = session.polling_id

    with pytest.raises(ReentrancyViolation):
        orch.submit_amount(session, "5140000", notifier, spawn)

    assert session.polling_id == token
    assert session.selected_exchange == "binance"

    session.clear()
    outcome = await first.task
    assert outcome.reason == "cancelled"


async def test_no_exchange_selected(clock, session, notifier):
    orch = make_orchestrator(clock, FakeGateway())
    with pytest.raises(ValidationError) as exc:
        orch.submit_amount(session, "100", notifier, spawn)
    assert exc.value.key == "select_exchange"
    assert not session.frozen


async def test_invalid_amount_does_not_freeze(clock, session, notifier):
    orch = make_orchestrator(clock, FakeGateway())
    session.select_exchange("binance")
    with pytest.raises(ValidationError):
        orch.submit_amount(session, "hello", notifier, spawn)
    assert not session.frozen
    assert session.selected_exchange == "binance"


async def test_amount_too_small_for_rate_still_rounds_up(clock, session, notifier):
    gw = FakeGateway("binance", responses=[[deposit("0.01")]])
    orch = make_orchestrator(clock, gw)
    session.select_exchange("binance")

    pending = orch.submit_amount(session, "1", notifier, spawn)

    assert pending.expected_amount == Decimal("0.01")
    assert (await pending.task).matched


async def test_uses_session_rate(clock, session, notifier):
    gw = FakeGateway("binance", responses=[[deposit("33.34")]])
    orch = make_orchestrator(clock, gw)
    session.set_rate("3")
    session.select_exchange("binance")

    pending = orch.submit_amount(session, "100", notifier, spawn)

    assert pending.expected_amount == Decimal("33.34")
    await pending.task


async def test_old_task_does_not_unfreeze_new_session(clock, session, notifier):
    gw = FakeGateway("binance", default=[])
    orch = make_orchestrator(clock, gw)

    session.select_exchange("binance")
    first = orch.submit_amount(session, "2570000", notifier, spawn)
    session.clear()
    session.select_exchange("binance")
    second = orch.submit_amount(session, "5140000", notifier, spawn)

    await first.task
    assert session.is_frozen_by(second.token)

    session.clear()
    await second.task


async def test_exchange_photo_is_sent_when_present(clock, session, notifier, tmp_path):
    (tmp_path / "binance.jpg").write_bytes(b"\xff\xd8")
    gw = FakeGateway("binance", responses=[[deposit("100")]])
    orch = make_orchestrator(clock, gw, assets_dir=str(tmp_path))
    session.select_exchange("binance")

    await orch.submit_amount(session, "2570000", notifier, spawn).task

    assert notifier.photos == [str(tmp_path / "binance.jpg")]


async def test_reconciler_crash_still_unfreezes(clock, session, notifier):
    class Broken(PollingReconciler):
        async def run(self, *a, **kw):
            raise RuntimeError("bug")

    orch = PaymentOrchestrator(Broken({}), PaymentSettings())
    session.select_exchange("binance")

    outcome = await orch.submit_amount(session, "100", notifier, spawn).task

    assert outcome.status == PollingStatus.ERRORED
    assert not session.frozen
    assert notifier.keys()[-1] == "session_cancelled"


@pytest.mark.parametrize("text", ["1e40", "9" * 40])
async def test_huge_amount_is_rejected_without_freezing(clock, session, notifier, text):
    orch = make_orchestrator(clock, FakeGateway())
    session.select_exchange("binance")

    with pytest.raises(ValidationError) as exc:
        orch.submit_amount(session, text, notifier, spawn)

    assert exc.value.key == "invalid_amount"
    assert not session.frozen
    assert session.selected_exchange == "binance"


async def test_thousands_separated_amount_is_accepted(clock, session, notifier):
    gw = FakeGateway("binance", responses=[[deposit("100")]])
    orch = make_orchestrator(clock, gw)
    session.select_exchange("binance")

    pending = orch.submit_amount(session, "2,570,000", notifier, spawn)

    assert pending.fiat_amount == Decimal("2570000")
    assert pending.expected_amount == Decimal("100.00")
    assert (await pending.task).matched
