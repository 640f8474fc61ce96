# payments/errors.py


class PaymentError(Exception):
    """Базовая ошибка платёжной сессии (локальна для одного пользователя)."""


class ValidationError(PaymentError):
    """Некорректный ввод: сумма, курс, биржа. Пользователь получает повторный запрос."""

    def __init__(self, message, key="invalid_amount"):
        super().__init__(message)
        self.key = key


class ReentrancyViolation(PaymentError):
    """Попытка изменить сессию, пока идёт ожидание платежа."""


class GatewayTransientError(PaymentError):
    """Сетевая/авторизационная ошибка биржи. Такт опроса считается пустым."""

    def __init__(self, exchange_id, message):
        super().__init__(f"{exchange_id}: {message}")
        self.exchange_id = exchange_id


class FatalConfigError(RuntimeError):
    """Отсутствуют обязательные параметры запуска."""
