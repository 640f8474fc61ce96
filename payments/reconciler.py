# payments/reconciler.py
import asyncio
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from exchanges.base import DepositRecord, ExchangeGateway
from payments.matcher import PERCENTAGE_GAP, match_deposit

log = logging.getLogger("payments")


class PollingStatus(str, Enum):
    RUNNING = "running"
    MATCHED = "matched"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


@dataclass
class PollingSession:
    exchange_id: str
    expected_amount: Decimal
    started_at: float
    deadline_at: float
    status: PollingStatus = PollingStatus.RUNNING
    attempts: int = 0


@dataclass(frozen=True)
class Outcome:
    status: PollingStatus
    record: Optional[DepositRecord] = None
    reason: Optional[str] = None
    attempts: int = 0

    @property
    def matched(self) -> bool:
        return self.status == PollingStatus.MATCHED


def _wall_ms() -> int:
    return int(time.time() * 1000)


class PollingReconciler:
    """
    Опрашивает историю депозитов биржи, пока не найдётся подходящий депозит,
    не истечёт max_duration_ms или сессию не отменят снаружи (is_active() -> False).
    Ошибки биржи не прерывают цикл: такой такт считается пустым.
    """

    def __init__(self, gateways: Dict[str, ExchangeGateway], gap_pct: Decimal = PERCENTAGE_GAP,
                 gateway_timeout_s: float = 15,
                 clock: Callable[[], float] = time.monotonic,
                 now_ms: Callable[[], int] = _wall_ms,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.gateways = gateways
        self.gap_pct = gap_pct
        self.gateway_timeout_s = gateway_timeout_s
        self.clock = clock
        self.now_ms = now_ms
        self.sleep = sleep

    async def _poll_once(self, gateway: ExchangeGateway, asset: str, since_ms: int):
        try:
            return await asyncio.wait_for(gateway.list_deposits(asset, since_ms), self.gateway_timeout_s)
        except asyncio.TimeoutError:
            log.warning(f"{gateway.exchange_id}: list_deposits timed out after {self.gateway_timeout_s}s")
        except Exception as e:
            log.warning(f"{gateway.exchange_id}: list_deposits failed: {e}")
        return []

    async def run(self, exchange_id: str, expected_amount: Decimal, asset: str,
                  max_duration_ms: int, interval_ms: int, lookback_ms: int,
                  is_active: Callable[[], bool] = lambda: True) -> Outcome:
        gateway = self.gateways.get(exchange_id)
        if gateway is None:
            return Outcome(PollingStatus.ERRORED, reason=f"no gateway for {exchange_id!r}")
        if not expected_amount.is_finite() or expected_amount <= 0:
            return Outcome(PollingStatus.ERRORED, reason=f"invalid expected amount {expected_amount}")

        started = self.clock()
        ps = PollingSession(exchange_id, expected_amount, started, started + max_duration_ms / 1000)
        log.info(f"{exchange_id}: waiting for {expected_amount} {asset} (up to {max_duration_ms // 1000}s)")

        while self.clock() < ps.deadline_at and is_active():
            ps.attempts += 1
            records = await self._poll_once(gateway, asset, self.now_ms() - lookback_ms)
            found = match_deposit(records, expected_amount, self.gap_pct)
            if found is not None:
                ps.status = PollingStatus.MATCHED
                log.info(f"{exchange_id}: matched {found.amount} {found.currency} "
                         f"for {expected_amount} after {ps.attempts} attempt(s)")
                return Outcome(ps.status, record=found, attempts=ps.attempts)

            remaining = ps.deadline_at - self.clock()
            if remaining <= 0:
                break
            await self.sleep(min(interval_ms / 1000, remaining))

        ps.status = PollingStatus.TIMED_OUT
        reason = "deadline" if is_active() else "cancelled"
        log.info(f"{exchange_id}: no deposit for {expected_amount} ({reason}, {ps.attempts} attempt(s))")
        return Outcome(ps.status, reason=reason, attempts=ps.attempts)
