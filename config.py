# config.py
import os
from decimal import Decimal

from dotenv import load_dotenv

from payments.errors import FatalConfigError

load_dotenv()

TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")

# Фиксированный набор бирж (порядок = порядок кнопок в меню)
EXCHANGES = ("binance", "bybit", "gate")

# API ключи бирж
BINANCE_API_KEY = os.getenv("BINANCE_API_KEY", "")
BINANCE_API_SECRET = os.getenv("BINANCE_API_SECRET", "")
BINANCE_BASE_URL = os.getenv("BINANCE_BASE_URL", "https://api.binance.com")
BINANCE_SOURCE = os.getenv("BINANCE_SOURCE", "deposits").lower()  # deposits | pay

BYBIT_API_KEY = os.getenv("BYBIT_API_KEY", "")
BYBIT_API_SECRET = os.getenv("BYBIT_API_SECRET", "")
BYBIT_TESTNET = os.getenv("BYBIT_TESTNET", "false").lower() == "true"

GATE_API_KEY = os.getenv("GATE_API_KEY", "")
GATE_API_SECRET = os.getenv("GATE_API_SECRET", "")

CREDENTIALS = {
    "binance": (BINANCE_API_KEY, BINANCE_API_SECRET),
    "bybit": (BYBIT_API_KEY, BYBIT_API_SECRET),
    "gate": (GATE_API_KEY, GATE_API_SECRET),
}

# Курс и валюты
VND_PRICE = Decimal(os.getenv("VND_PRICE", "25700"))  # fiat per 1 USDT
SETTLEMENT_ASSET = os.getenv("SETTLEMENT_ASSET", "USDT")
FIAT_CURRENCY = os.getenv("FIAT_CURRENCY", "VND")

# Параметры сверки депозитов
PERCENTAGE_GAP = Decimal(os.getenv("PERCENTAGE_GAP", "98"))
MAX_CHECKING_DURATION_MS = int(os.getenv("MAX_CHECKING_DURATION_MS", "180000"))
CHECK_INTERVAL_MS = int(os.getenv("CHECK_INTERVAL_MS", "5000"))
LOOKBACK_MS = int(os.getenv("LOOKBACK_MS", str(3 * 60 * 1000)))
GATEWAY_TIMEOUT_S = float(os.getenv("GATEWAY_TIMEOUT_S", "15"))

DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Asia/Ho_Chi_Minh")

# Хранилища
SESSION_FILE_PATH = os.getenv("SESSION_FILE_PATH", "session.pickle")
ENABLE_SQLITE = os.getenv("ENABLE_SQLITE", "false").lower() == "true"
SQLITE_PATH = os.getenv("SQLITE_PATH", "payments.db")
ASSETS_DIR = os.getenv("ASSETS_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def validate_config(token=None, credentials=None):
    """Проверка обязательных параметров перед запуском бота."""
    token = TOKEN if token is None else token
    credentials = CREDENTIALS if credentials is None else credentials

    if not token:
        raise FatalConfigError("TELEGRAM_BOT_TOKEN is not set")

    missing = [name for name, (key, secret) in credentials.items() if not key or not secret]
    if missing:
        raise FatalConfigError(f"Missing API credentials for: {', '.join(missing)}")

    if not (0 < PERCENTAGE_GAP <= 100):
        raise FatalConfigError(f"PERCENTAGE_GAP must be in (0, 100], got {PERCENTAGE_GAP}")
    if VND_PRICE <= 0:
        raise FatalConfigError(f"VND_PRICE must be positive, got {VND_PRICE}")
    if BINANCE_SOURCE not in ("deposits", "pay"):
        raise FatalConfigError(f"BINANCE_SOURCE must be 'deposits' or 'pay', got {BINANCE_SOURCE!r}")
