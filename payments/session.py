# payments/session.py
import uuid
from decimal import Decimal
from typing import MutableMapping, Optional, Sequence

from payments.errors import ReentrancyViolation, ValidationError
from payments.ledger import DEFAULT_TIMEZONE, BalanceLedger
from utils.validate import parse_rate

DEFAULT_LANG = "en"


class SessionState:
    """
    Типизированный доступ к user_data одного пользователя.

    Состояния: Idle -> ExchangeSelected -> Frozen (идёт ожидание платежа) -> Idle.
    Флаг заморозки хранится как токен текущего опроса ("polling_id"): цикл опроса
    работает, пока сессия заморожена именно его токеном.
    """

    def __init__(self, data: MutableMapping, exchanges: Sequence[str],
                 default_rate: Decimal, tz_name: str = DEFAULT_TIMEZONE):
        self.data = data
        self.exchanges = tuple(exchanges)
        self.default_rate = Decimal(default_rate)
        self.tz_name = tz_name

    # --- выбор биржи ---
    @property
    def selected_exchange(self) -> Optional[str]:
        return self.data.get("selected_exchange")

    def select_exchange(self, exchange_id: str) -> None:
        if self.frozen:
            raise ReentrancyViolation("payment session is still running")
        if exchange_id not in self.exchanges:
            raise ValidationError(f"unknown exchange {exchange_id!r}", key="invalid_action")
        self.data["selected_exchange"] = exchange_id

    # --- заморозка ---
    @property
    def polling_id(self) -> Optional[str]:
        return self.data.get("polling_id")

    @property
    def frozen(self) -> bool:
        return self.polling_id is not None

    def freeze(self) -> str:
        if self.frozen:
            raise ReentrancyViolation("payment session is still running")
        token = uuid.uuid4().hex
        self.data["polling_id"] = token
        return token

    def is_frozen_by(self, token: str) -> bool:
        return self.polling_id == token

    def unfreeze(self, token: Optional[str] = None) -> bool:
        """Снять заморозку. С токеном только если заморожено этим же токеном."""
        if token is not None and not self.is_frozen_by(token):
            return False
        self.data["polling_id"] = None
        self.data["selected_exchange"] = None
        return True

    def clear(self) -> None:
        # Кнопка "очистить сессию": цикл опроса увидит это на следующей итерации
        self.unfreeze()

    # --- курс ---
    @property
    def conversion_rate(self) -> Decimal:
        return self.data.get("conversion_rate") or self.default_rate

    def set_rate(self, text) -> Decimal:
        if self.frozen:
            raise ReentrancyViolation("cannot change rate while payment session is running")
        rate = parse_rate(text)
        self.data["conversion_rate"] = rate
        return rate

    # --- язык ---
    @property
    def language(self) -> str:
        return self.data.get("lang") or DEFAULT_LANG

    @language.setter
    def language(self, code: str) -> None:
        self.data["lang"] = code

    # --- баланс ---
    @property
    def ledger(self) -> BalanceLedger:
        balances = self.data.get("balances")
        if balances is None:
            balances = self.data["balances"] = {}
        return BalanceLedger(balances, self.exchanges, tz_name=self.tz_name)
