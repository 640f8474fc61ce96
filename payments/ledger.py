# payments/ledger.py
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, MutableMapping, Optional, Sequence

import pytz

DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"


@dataclass
class LedgerSummary:
    total: Decimal
    transactions: List[dict] = field(default_factory=list)


class BalanceLedger:
    """
    Дневной баланс подтверждённых платежей по биржам.
    Хранится прямо в словаре сессии пользователя (storage), поэтому переживает
    перезапуск вместе с persistence, но никакой сверки с биржей не делает.
    """

    def __init__(self, storage: MutableMapping, exchanges: Sequence[str],
                 tz_name: str = DEFAULT_TIMEZONE, now: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self.exchanges = tuple(exchanges)
        self.tz = pytz.timezone(tz_name)
        self._now = now or (lambda: datetime.now(self.tz))

    @staticmethod
    def _empty() -> dict:
        return {"total": Decimal("0"), "transactions": []}

    def _entry(self, exchange_id: str) -> dict:
        return self.storage.setdefault(exchange_id, self._empty())

    def record(self, exchange_id: str, amount: Decimal, fiat_amount: Optional[Decimal] = None) -> dict:
        if exchange_id not in self.exchanges:
            raise KeyError(exchange_id)
        entry = self._entry(exchange_id)
        tx = {"amount": Decimal(amount), "fiat_amount": fiat_amount, "timestamp": self._now()}
        entry["transactions"].append(tx)
        entry["total"] = entry["total"] + tx["amount"]
        return tx

    def total_for(self, exchange_id: str) -> LedgerSummary:
        entry = self.storage.get(exchange_id) or self._empty()
        return LedgerSummary(entry["total"], list(entry["transactions"]))

    def aggregate(self) -> Optional[LedgerSummary]:
        """None = нечего показывать (нет ни одной транзакции); нулевая сумма с записями считается отчётом."""
        total = Decimal("0")
        transactions = []
        for name in self.exchanges:
            entry = self.storage.get(name)
            if not entry or not entry["transactions"]:
                continue
            total += entry["total"]
            transactions.extend(entry["transactions"])
        if not transactions:
            return None
        return LedgerSummary(total, transactions)

    def per_exchange(self) -> Dict[str, LedgerSummary]:
        out = {}
        for name in self.exchanges:
            summary = self.total_for(name)
            if summary.transactions:
                out[name] = summary
        return out

    def reset(self) -> None:
        self.storage.clear()
        for name in self.exchanges:
            self.storage[name] = self._empty()
