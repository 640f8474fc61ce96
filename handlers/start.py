# handlers/start.py
from telegram import Update
from telegram.ext import ContextTypes

import config
from handlers.common import get_notifier, get_session
from utils.keyboards import build_menu_kb
from utils.texts import language_map


async def print_menu(update: Update, context: ContextTypes.DEFAULT_TYPE):
    notifier = get_notifier(update, context)
    await notifier.send("choose_action", reply_markup=build_menu_kb(notifier.lang, config.EXCHANGES))


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    notifier = get_notifier(update, context)
    await notifier.send("welcome", bot_name=context.bot.first_name or "Bot", fiat=config.FIAT_CURRENCY)
    await print_menu(update, context)


async def menu(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await print_menu(update, context)


async def set_language(update: Update, context: ContextTypes.DEFAULT_TYPE):
    q = update.callback_query
    await q.answer()

    code = context.matches[0].group(1) if context.matches else ""
    if code not in language_map:
        await get_notifier(update, context).send("invalid_action")
        return

    get_session(context).language = code
    await print_menu(update, context)
