# exchanges/base.py
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import List, Optional


class DepositStatus(str, Enum):
    OK = "ok"
    PENDING = "pending"
    FAILED = "failed"

    @classmethod
    def from_raw(cls, value) -> "DepositStatus":
        # ccxt: ok / pending / failed / canceled
        raw = (value or "").lower()
        if raw == "ok":
            return cls.OK
        if raw == "pending":
            return cls.PENDING
        return cls.FAILED


@dataclass(frozen=True)
class DepositRecord:
    amount: Decimal
    status: DepositStatus
    timestamp_ms: int
    currency: str
    txid: Optional[str] = None


def to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


class ExchangeGateway(ABC):
    """Единый интерфейс истории депозитов одной биржи."""

    exchange_id: str = ""

    @abstractmethod
    async def list_deposits(self, asset: str, since_ms: int) -> List[DepositRecord]:
        """
        Депозиты `asset` начиная с `since_ms` в порядке, который отдаёт биржа.
        Сетевые ошибки поднимаются как GatewayTransientError.
        """

    async def close(self) -> None:
        pass
