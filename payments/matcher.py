# payments/matcher.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from exchanges.base import DepositRecord, DepositStatus

PERCENTAGE_GAP = Decimal("98")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class MatchRequest:
    expected_amount: Decimal
    tolerance_low_pct: Decimal
    tolerance_high_pct: Decimal

    @classmethod
    def from_gap(cls, expected_amount: Decimal, gap_pct: Decimal = PERCENTAGE_GAP) -> "MatchRequest":
        gap_pct = Decimal(gap_pct)
        return cls(Decimal(expected_amount), gap_pct, 2 * HUNDRED - gap_pct)

    def bounds(self) -> Tuple[Decimal, Decimal]:
        return (
            self.expected_amount * self.tolerance_low_pct / HUNDRED,
            self.expected_amount * self.tolerance_high_pct / HUNDRED,
        )


def tolerance_band(expected_amount: Decimal, gap_pct: Decimal = PERCENTAGE_GAP) -> Tuple[Decimal, Decimal]:
    """lower = E * P/100, upper = E * (2 - P/100). Для P=98 это [0.98E, 1.02E]."""
    expected_amount = Decimal(expected_amount)
    gap_pct = Decimal(gap_pct)
    if not expected_amount.is_finite() or expected_amount <= 0:
        raise ValueError(f"expected amount must be positive, got {expected_amount}")
    if not (0 < gap_pct <= HUNDRED):
        raise ValueError(f"gap percentage must be in (0, 100], got {gap_pct}")
    return MatchRequest.from_gap(expected_amount, gap_pct).bounds()


def match_deposit(records: Iterable[DepositRecord], expected_amount: Decimal,
                  gap_pct: Decimal = PERCENTAGE_GAP) -> Optional[DepositRecord]:
    """
    Первый (в порядке биржи) проведённый депозит, попадающий в допуск.
    Ближайший по сумме НЕ ищем: при двух подходящих депозитах выигрывает тот, что раньше в списке.
    """
    low, high = tolerance_band(expected_amount, gap_pct)
    for rec in records:
        if rec.status == DepositStatus.OK and low <= rec.amount <= high:
            return rec
    return None
