# utils/validate.py
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from payments.errors import ValidationError

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1e15")
MAX_RATE = Decimal("1e9")

THOUSANDS_RE = re.compile(r"^-?\d{1,3}(,\d{3})+$")


def _unify_separators(s: str) -> str:
    """Запятая как разделитель тысяч ("2,570,000") или как десятичная ("12,5")."""
    if "," not in s:
        return s
    if "." in s:
        return s.replace(",", "")
    if THOUSANDS_RE.match(s):
        return s.replace(",", "")
    return s.replace(",", ".")


def to_normal_number(value, precision: int = 5) -> Optional[Decimal]:
    """
    "2 570 000" / "2,570,000" / "2570000,5" -> Decimal. None если не число, NaN или бесконечность.
    Очень маленькие значения (< 0.0001) считаются нулём.
    """
    s = _unify_separators(str(value if value is not None else "").strip().replace(" ", ""))
    if not s:
        return None
    try:
        num = Decimal(s)
    except InvalidOperation:
        return None
    if not num.is_finite():
        return None
    if num < Decimal("0.0001"):
        return Decimal("0") if num >= 0 else num
    if num.as_tuple().exponent < -precision:
        try:
            num = num.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None
    return num


def parse_amount(text) -> Decimal:
    amount = to_normal_number(text)
    if amount is None or amount <= 0 or amount > MAX_AMOUNT:
        raise ValidationError(f"invalid amount: {text!r}", key="invalid_amount")
    return amount


def parse_rate(text) -> Decimal:
    """Курс: положительное конечное число с точностью до сотых, не больше MAX_RATE."""
    rate = to_normal_number(text)
    if rate is None or rate > MAX_RATE:
        raise ValidationError(f"invalid rate: {text!r}", key="invalid_rate")
    try:
        rate = rate.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"invalid rate: {text!r}", key="invalid_rate")
    if rate <= 0:
        raise ValidationError(f"invalid rate: {text!r}", key="invalid_rate")
    return rate


def parse_set_args(text: str) -> dict:
    """"/set vnd=26000 foo=bar" -> {"vnd": "26000", "foo": "bar"}"""
    out = {}
    for part in (text or "").split()[1:]:
        if "=" not in part:
            continue
        k, v = part.split("=", 1)
        out[k.strip().lower()] = v.strip()
    return out
