# utils/pricing.py
import aiohttp
import asyncio
import logging
from datetime import datetime, timedelta
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Dict, Optional

log = logging.getLogger("pricing")

CENT = Decimal("0.01")

# Кэш справочного курса P2P
rate_cache = {
    "last_update": None,
    "rates": {},
}

P2P_ENDPOINT = "https://p2p.binance.com/bapi/c2c/v2/friendly/c2c/adv/search"


def ceil_to_cents(value) -> Decimal:
    """Округление ВВЕРХ до сотых: 33.3333 -> 33.34. Получатель не должен недополучить из-за округления."""
    value = Decimal(value)
    if not value.is_finite():
        raise ValueError(f"cannot round {value}")
    try:
        return value.quantize(CENT, rounding=ROUND_CEILING)
    except InvalidOperation:
        raise ValueError(f"{value} is too large to round to cents")


def convert_to_stablecoin(fiat_amount, rate) -> Decimal:
    """fiat / (fiat за 1 USDT), округлено вверх до центов."""
    rate = Decimal(rate)
    if rate <= 0:
        raise ValueError(f"conversion rate must be positive, got {rate}")
    return ceil_to_cents(Decimal(fiat_amount) / rate)


async def _fetch_p2p_side_avg(session: aiohttp.ClientSession, asset: str, fiat: str,
                              trade_type: str) -> Optional[float]:
    """
    Средняя цена по 10 объявлениям Binance P2P для trade_type in {"BUY","SELL"}.
    None если площадка не ответила.
    """
    payload = {
        "page": 1,
        "rows": 10,
        "asset": asset,
        "fiat": fiat,
        "tradeType": trade_type,
        "publisherType": None,
    }
    try:
        async with session.post(P2P_ENDPOINT, json=payload) as r:
            data = await r.json(content_type=None)
            prices = []
            for adv in data.get("data") or []:
                try:
                    prices.append(float(adv["adv"]["price"]))
                except (KeyError, TypeError, ValueError):
                    continue
            if prices:
                return sum(prices) / len(prices)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        log.warning(f"P2P {asset}/{fiat} fetch failed ({trade_type}): {e}")
    return None


async def fetch_reference_rate(asset: str = "USDT", fiat: str = "VND") -> Optional[Decimal]:
    """Справочный курс P2P (среднее BUY/SELL) с кэшированием на 60 секунд. Только для подсказки оператору."""
    key = f"{asset}/{fiat}"
    if rate_cache["last_update"] is not None:
        age = datetime.now() - rate_cache["last_update"]
        if age < timedelta(seconds=60) and key in rate_cache["rates"]:
            return rate_cache["rates"][key]

    timeout = aiohttp.ClientTimeout(total=8)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        buy, sell = await asyncio.gather(
            _fetch_p2p_side_avg(session, asset, fiat, "BUY"),
            _fetch_p2p_side_avg(session, asset, fiat, "SELL"),
        )

    if not buy or not sell:
        return None

    rate = Decimal(str((buy + sell) / 2)).quantize(CENT)
    rate_cache["rates"][key] = rate
    rate_cache["last_update"] = datetime.now()
    log.info(f"P2P reference {key}: {rate}")
    return rate


def reset_cache() -> Dict:
    rate_cache["last_update"] = None
    rate_cache["rates"] = {}
    return rate_cache
