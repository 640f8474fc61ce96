# handlers/menu.py
import logging

from telegram import Update
from telegram.ext import ContextTypes

import config
from handlers.common import get_notifier, get_session
from payments.errors import ReentrancyViolation, ValidationError
from utils.keyboards import CHECK_BALANCE, CLEAR_BALANCE, CLEAR_SESSION, SELECT_LANGUAGE, build_lang_kb
from utils.texts import render_balance

log = logging.getLogger("handlers")


async def check_daily_balance(update: Update, context: ContextTypes.DEFAULT_TYPE):
    session = get_session(context)
    notifier = get_notifier(update, context)
    summary = session.ledger.aggregate()
    if summary is None:
        await notifier.send("nothing_on_balance_sheet")
        return
    await notifier.send_text(render_balance(notifier.lang, summary, config.SETTLEMENT_ASSET, config.FIAT_CURRENCY))


async def select_action(update: Update, context: ContextTypes.DEFAULT_TYPE):
    q = update.callback_query
    await q.answer()

    notifier = get_notifier(update, context)
    value = (q.data or "").replace("SELECT_", "", 1)
    if not value:
        await notifier.send("invalid_action")
        return

    session = get_session(context)

    if value == SELECT_LANGUAGE:
        await notifier.send("select_language_prompt", reply_markup=build_lang_kb())
        return

    if value == CLEAR_SESSION:
        session.clear()
        log.info(f"user {update.effective_user.id}: session cleared")
        await notifier.send("clear_session_success")
        return

    if value == CLEAR_BALANCE:
        await notifier.send("clear_daily_balance_prompt")
        return

    if value == CHECK_BALANCE:
        await check_daily_balance(update, context)
        return

    try:
        session.select_exchange(value)
    except ReentrancyViolation:
        await notifier.send("session_still_running")
        return
    except ValidationError as e:
        await notifier.send(e.key)
        return

    await notifier.send("amount_request", exchange=value.capitalize(), fiat=config.FIAT_CURRENCY)
