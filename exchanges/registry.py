# exchanges/registry.py
import logging
from typing import Dict

import config
from exchanges.base import ExchangeGateway
from exchanges.binance_pay import BinancePayGateway
from exchanges.ccxt_gateway import CcxtDepositGateway

log = logging.getLogger("gateways")


def _binance() -> ExchangeGateway:
    if config.BINANCE_SOURCE == "pay":
        return BinancePayGateway(
            config.BINANCE_API_KEY, config.BINANCE_API_SECRET,
            base_url=config.BINANCE_BASE_URL, timeout_s=config.GATEWAY_TIMEOUT_S,
        )
    return CcxtDepositGateway(
        "binance", config.BINANCE_API_KEY, config.BINANCE_API_SECRET,
        timeout_s=config.GATEWAY_TIMEOUT_S,
    )


def _bybit() -> ExchangeGateway:
    gw = CcxtDepositGateway(
        "bybit", config.BYBIT_API_KEY, config.BYBIT_API_SECRET,
        timeout_s=config.GATEWAY_TIMEOUT_S,
    )
    if config.BYBIT_TESTNET:
        gw.client.set_sandbox_mode(True)
    return gw


def _gate() -> ExchangeGateway:
    return CcxtDepositGateway(
        "gate", config.GATE_API_KEY, config.GATE_API_SECRET,
        timeout_s=config.GATEWAY_TIMEOUT_S,
    )


FACTORIES = {
    "binance": _binance,
    "bybit": _bybit,
    "gate": _gate,
}


def build_gateways(exchanges=config.EXCHANGES) -> Dict[str, ExchangeGateway]:
    return {name: FACTORIES[name]() for name in exchanges}


async def close_gateways(gateways: Dict[str, ExchangeGateway]) -> None:
    for name, gw in gateways.items():
        try:
            await gw.close()
        except Exception as e:
            log.warning(f"{name}: close failed: {e}")
