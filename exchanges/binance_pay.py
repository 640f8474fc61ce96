# exchanges/binance_pay.py
import hashlib
import hmac
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import aiohttp

from exchanges.base import DepositRecord, DepositStatus, ExchangeGateway, to_decimal
from payments.errors import GatewayTransientError

log = logging.getLogger("gateways")

TRANSACTIONS_ENDPOINT = "/sapi/v1/pay/transactions"


def sign_query(params: Dict[str, Any], secret: str) -> str:
    query = urlencode(params)
    return hmac.new(secret.encode("utf-8"), query.encode("utf-8"), hashlib.sha256).hexdigest()


def normalize_pay_transactions(rows: List[Dict[str, Any]], asset: str) -> List[DepositRecord]:
    """
    Binance Pay отдаёт и входящие, и исходящие переводы.
    Депозит = положительная сумма в нужной валюте; у Pay-переводов нет статуса, они уже проведены.
    """
    out = []
    for row in rows or []:
        if (row.get("currency") or "").upper() != asset.upper():
            continue
        amount = to_decimal(row.get("amount"))
        if amount is None or amount <= 0:
            continue
        out.append(DepositRecord(
            amount=amount,
            status=DepositStatus.OK,
            timestamp_ms=int(row.get("transactionTime") or 0),
            currency=asset.upper(),
            txid=row.get("transactionId"),
        ))
    return out


class BinancePayGateway(ExchangeGateway):
    exchange_id = "binance"

    def __init__(self, api_key: str, secret: str, base_url: str = "https://api.binance.com",
                 timeout_s: float = 15, limit: int = 100):
        self.api_key = api_key
        self.secret = secret
        self.base_url = base_url.rstrip("/")
        self.limit = limit
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout, headers={"X-MBX-APIKEY": self.api_key}
            )
        return self._session

    async def list_deposits(self, asset: str, since_ms: int) -> List[DepositRecord]:
        params = {"timestamp": int(time.time() * 1000), "limit": self.limit}
        if since_ms:
            params["startTime"] = since_ms
        params["signature"] = sign_query(params, self.secret)

        session = self._get_session()
        try:
            async with session.get(self.base_url + TRANSACTIONS_ENDPOINT, params=params) as r:
                if r.status != 200:
                    body = await r.text()
                    raise GatewayTransientError(self.exchange_id, f"HTTP {r.status}: {body[:200]}")
                data = await r.json()
        except (aiohttp.ClientError, ValueError) as e:
            raise GatewayTransientError(self.exchange_id, str(e)) from e

        return normalize_pay_transactions(data.get("data") or [], asset)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
