# payments/orchestrator.py
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from payments.errors import ReentrancyViolation, ValidationError
from payments.reconciler import Outcome, PollingReconciler, PollingStatus
from payments.session import SessionState
from utils.pricing import convert_to_stablecoin
from utils.texts import fmt_asset, fmt_fiat
from utils.validate import parse_amount

log = logging.getLogger("payments")


@dataclass
class PaymentSettings:
    asset: str = "USDT"
    fiat: str = "VND"
    max_duration_ms: int = 180000
    interval_ms: int = 5000
    lookback_ms: int = 180000
    assets_dir: Optional[str] = None

    @property
    def minutes(self) -> int:
        return self.max_duration_ms // 60000


@dataclass
class PendingPayment:
    exchange_id: str
    fiat_amount: Decimal
    expected_amount: Decimal
    token: str
    task: object = None


class PaymentOrchestrator:
    """
    Переводит сессию пользователя ExchangeSelected -> Frozen -> Idle:
    проверяет сумму, конвертирует в USDT, запускает опрос биржи и
    по его исходу пишет баланс и снимает заморозку.
    """

    def __init__(self, reconciler: PollingReconciler, settings: PaymentSettings,
                 journal: Optional[Callable[[dict], None]] = None):
        self.reconciler = reconciler
        self.settings = settings
        self.journal = journal

    def submit_amount(self, session: SessionState, text, notifier,
                      spawn: Callable[[Awaitable], object], user_id: Optional[int] = None) -> PendingPayment:
        if session.frozen:
            raise ReentrancyViolation("payment session is still running")
        exchange_id = session.selected_exchange
        if not exchange_id:
            raise ValidationError("no exchange selected", key="select_exchange")

        fiat_amount = parse_amount(text)
        try:
            expected = convert_to_stablecoin(fiat_amount, session.conversion_rate)
        except ValueError as e:
            raise ValidationError(f"cannot convert {fiat_amount}: {e}", key="invalid_amount")
        if expected <= 0:
            raise ValidationError(f"amount {fiat_amount} converts to zero", key="invalid_amount")

        # заморозка и запуск задачи без await между ними
        token = session.freeze()
        pending = PendingPayment(exchange_id, fiat_amount, expected, token)
        pending.task = spawn(self._await_payment(session, pending, notifier, user_id))
        return pending

    async def _await_payment(self, session: SessionState, pending: PendingPayment,
                             notifier, user_id: Optional[int]) -> Outcome:
        s = self.settings
        try:
            await notifier.send("entered_amount", amount=fmt_fiat(pending.fiat_amount), fiat=s.fiat,
                                converted=fmt_asset(pending.expected_amount), asset=s.asset)
            if s.assets_dir:
                await notifier.send_photo(os.path.join(s.assets_dir, f"{pending.exchange_id}.jpg"))
            await notifier.send("session_started", converted=fmt_asset(pending.expected_amount),
                                asset=s.asset, exchange=pending.exchange_id.capitalize(), time=s.minutes)

            outcome = await self.reconciler.run(
                pending.exchange_id, pending.expected_amount, s.asset,
                s.max_duration_ms, s.interval_ms, s.lookback_ms,
                is_active=lambda: session.is_frozen_by(pending.token),
            )
        except Exception as e:
            log.exception(f"payment task for user {user_id} failed")
            outcome = Outcome(PollingStatus.ERRORED, reason=str(e))

        try:
            await self._finish(session, pending, notifier, outcome)
        finally:
            session.unfreeze(pending.token)
            self._journal(user_id, pending, outcome)
        return outcome

    async def _finish(self, session: SessionState, pending: PendingPayment, notifier, outcome: Outcome):
        if outcome.matched:
            session.ledger.record(pending.exchange_id, outcome.record.amount, pending.fiat_amount)
            await notifier.send("balance_changed", difference=fmt_asset(outcome.record.amount),
                                asset=self.settings.asset)
        else:
            if outcome.status == PollingStatus.ERRORED:
                log.error(f"{pending.exchange_id}: payment session errored: {outcome.reason}")
            await notifier.send("session_cancelled")

    def _journal(self, user_id, pending: PendingPayment, outcome: Outcome):
        if self.journal is None:
            return
        self.journal({
            "ts": datetime.now(timezone.utc).isoformat(),
            "user_id": user_id,
            "exchange": pending.exchange_id,
            "fiat_amount": pending.fiat_amount,
            "expected_amount": pending.expected_amount,
            "matched_amount": outcome.record.amount if outcome.record else None,
            "status": outcome.status.value,
            "attempts": outcome.attempts,
        })
