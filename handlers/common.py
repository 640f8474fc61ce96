# handlers/common.py
from telegram import Update
from telegram.ext import ContextTypes

import config
from payments.session import SessionState
from utils.notify import Notifier


def get_session(context: ContextTypes.DEFAULT_TYPE) -> SessionState:
    return SessionState(context.user_data, config.EXCHANGES, config.VND_PRICE, config.DISPLAY_TIMEZONE)


def get_lang(context: ContextTypes.DEFAULT_TYPE) -> str:
    return get_session(context).language


def get_notifier(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Notifier:
    return Notifier(context.bot, update.effective_chat.id, get_lang(context))


def get_orchestrator(context: ContextTypes.DEFAULT_TYPE):
    return context.bot_data["payments"]
