# handlers/admin.py
import logging

from telegram import Update
from telegram.ext import ContextTypes

import config
from handlers.common import get_notifier, get_session
from utils.texts import render_balance

log = logging.getLogger("handlers")


async def get_balance(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """/get_balance: отдельный отчёт по каждой бирже."""
    session = get_session(context)
    notifier = get_notifier(update, context)

    per_exchange = session.ledger.per_exchange()
    if not per_exchange:
        await notifier.send("nothing_on_balance_sheet")
        return

    for name, summary in per_exchange.items():
        await notifier.send_text(render_balance(
            notifier.lang, summary, config.SETTLEMENT_ASSET, config.FIAT_CURRENCY,
            exchange_name=name.capitalize(),
        ))


async def clear_balances(update: Update, context: ContextTypes.DEFAULT_TYPE):
    session = get_session(context)
    session.ledger.reset()
    log.info(f"user {update.effective_user.id}: daily balances cleared")
    await get_notifier(update, context).send("balances_cleared")
