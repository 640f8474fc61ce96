# exchanges/ccxt_gateway.py
import logging
from typing import Any, Dict, List, Optional

import ccxt.async_support as ccxt

from exchanges.base import DepositRecord, DepositStatus, ExchangeGateway, to_decimal
from payments.errors import GatewayTransientError

log = logging.getLogger("gateways")


def normalize_deposit(item: Dict[str, Any]) -> Optional[DepositRecord]:
    """Унифицированная структура депозита ccxt -> DepositRecord (None если сумма невалидна)."""
    amount = to_decimal(item.get("amount"))
    if amount is None:
        return None
    return DepositRecord(
        amount=amount,
        status=DepositStatus.from_raw(item.get("status")),
        timestamp_ms=int(item.get("timestamp") or 0),
        currency=(item.get("currency") or "").upper(),
        txid=item.get("txid") or item.get("id"),
    )


class CcxtDepositGateway(ExchangeGateway):
    def __init__(self, exchange_id: str, api_key: str, secret: str,
                 timeout_s: float = 15, options: Optional[Dict[str, Any]] = None, client=None):
        self.exchange_id = exchange_id
        if client is None:
            params = {
                "apiKey": api_key,
                "secret": secret,
                "enableRateLimit": True,
                "timeout": int(timeout_s * 1000),
            }
            params.update(options or {})
            client = getattr(ccxt, exchange_id)(params)
        self.client = client

    async def list_deposits(self, asset: str, since_ms: int) -> List[DepositRecord]:
        try:
            raw = await self.client.fetch_deposits(asset, since_ms)
        except ccxt.BaseError as e:
            raise GatewayTransientError(self.exchange_id, f"{type(e).__name__}: {e}") from e

        out = []
        for item in raw or []:
            rec = normalize_deposit(item)
            if rec is None:
                log.warning(f"{self.exchange_id}: skipping deposit without amount: {item.get('id')}")
                continue
            out.append(rec)
        return out

    async def close(self) -> None:
        await self.client.close()
