import logging
import sys

from telegram.ext import (
    Application, CallbackQueryHandler, CommandHandler, MessageHandler,
    PersistenceInput, PicklePersistence, filters
)

import config
from exchanges.registry import build_gateways, close_gateways
from handlers.admin import clear_balances, get_balance
from handlers.menu import select_action
from handlers.payment import enter_amount, set_values, show_rate
from handlers.start import menu, set_language, start
from payments.errors import FatalConfigError
from payments.orchestrator import PaymentOrchestrator, PaymentSettings
from payments.reconciler import PollingReconciler
from payments.session import SessionState
from utils.db import init_sqlite, make_journal

# ====== LOGGING ======
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger("deposit_desk")


def build_orchestrator(gateways) -> PaymentOrchestrator:
    reconciler = PollingReconciler(
        gateways,
        gap_pct=config.PERCENTAGE_GAP,
        gateway_timeout_s=config.GATEWAY_TIMEOUT_S,
    )
    settings = PaymentSettings(
        asset=config.SETTLEMENT_ASSET,
        fiat=config.FIAT_CURRENCY,
        max_duration_ms=config.MAX_CHECKING_DURATION_MS,
        interval_ms=config.CHECK_INTERVAL_MS,
        lookback_ms=config.LOOKBACK_MS,
        assets_dir=config.ASSETS_DIR,
    )
    journal = make_journal(config.SQLITE_PATH) if config.ENABLE_SQLITE else None
    return PaymentOrchestrator(reconciler, settings, journal=journal)


def release_stale_sessions(user_data) -> int:
    """Заморозка не переживает перезапуск: цикл опроса, которому она принадлежала, уже мёртв."""
    released = 0
    for data in user_data.values():
        session = SessionState(data, config.EXCHANGES, config.VND_PRICE, config.DISPLAY_TIMEZONE)
        if session.frozen:
            session.unfreeze()
            released += 1
    return released


async def post_init(app: Application):
    # клиенты бирж создаём внутри event loop
    gateways = build_gateways(config.EXCHANGES)
    app.bot_data["gateways"] = gateways
    app.bot_data["payments"] = build_orchestrator(gateways)

    released = release_stale_sessions(app.user_data)
    if released:
        logger.info(f"Released {released} stale payment session(s)")


async def post_shutdown(app: Application):
    await close_gateways(app.bot_data.get("gateways", {}))


async def on_error(update, context):
    logger.error("Unhandled error while processing update", exc_info=context.error)


# ====== MAIN ======
def main():
    try:
        config.validate_config()
    except FatalConfigError as e:
        logger.critical(f"Cannot start: {e}")
        sys.exit(1)

    if config.ENABLE_SQLITE:
        init_sqlite(config.SQLITE_PATH)

    app = (
        Application.builder()
        .token(config.TOKEN)
        .persistence(PicklePersistence(
            filepath=config.SESSION_FILE_PATH,
            # в bot_data живут клиенты бирж, их не сериализуем
            store_data=PersistenceInput(bot_data=False, chat_data=False, callback_data=False),
        ))
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("menu", menu))
    app.add_handler(CommandHandler("set", set_values))
    app.add_handler(CommandHandler("rate", show_rate))
    app.add_handler(CommandHandler("get_balance", get_balance))
    app.add_handler(CommandHandler("clear_balances", clear_balances))
    app.add_handler(CallbackQueryHandler(set_language, pattern=r"^SET_LANG_(.+)$"))
    app.add_handler(CallbackQueryHandler(select_action, pattern=r"^SELECT_"))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, enter_amount))
    app.add_error_handler(on_error)

    logger.info("✅ Bot is running...")
    app.run_polling()


if __name__ == "__main__":
    main()
