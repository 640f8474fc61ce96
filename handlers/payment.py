# handlers/payment.py
import logging

from telegram import Update
from telegram.ext import ContextTypes

import config
from handlers.common import get_notifier, get_orchestrator, get_session
from payments.errors import ReentrancyViolation, ValidationError
from utils.pricing import fetch_reference_rate
from utils.texts import fmt_fiat
from utils.validate import parse_set_args

log = logging.getLogger("handlers")


async def enter_amount(update: Update, context: ContextTypes.DEFAULT_TYPE):
    session = get_session(context)
    notifier = get_notifier(update, context)
    orchestrator = get_orchestrator(context)

    try:
        pending = orchestrator.submit_amount(
            session, update.message.text, notifier,
            spawn=lambda coro: context.application.create_task(coro, update=update),
            user_id=update.effective_user.id,
        )
    except ReentrancyViolation:
        await notifier.send("session_in_progress", time=orchestrator.settings.minutes)
        return
    except ValidationError as e:
        await notifier.send(e.key)
        return

    log.info(f"user {update.effective_user.id}: {pending.fiat_amount} {config.FIAT_CURRENCY} -> "
             f"{pending.expected_amount} {config.SETTLEMENT_ASSET} on {pending.exchange_id}")


async def set_values(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """/set vnd=26000"""
    args = parse_set_args(update.message.text)
    vnd = args.get(config.FIAT_CURRENCY.lower())
    if vnd is None:
        return

    session = get_session(context)
    notifier = get_notifier(update, context)
    try:
        rate = session.set_rate(vnd)
    except ReentrancyViolation:
        await notifier.send("session_still_running")
        return
    except ValidationError as e:
        await notifier.send(e.key)
        return

    await notifier.send("price_changed", asset=config.SETTLEMENT_ASSET, price=fmt_fiat(rate), fiat=config.FIAT_CURRENCY)


async def show_rate(update: Update, context: ContextTypes.DEFAULT_TYPE):
    session = get_session(context)
    notifier = get_notifier(update, context)
    await notifier.send("rate_info", asset=config.SETTLEMENT_ASSET,
                        price=fmt_fiat(session.conversion_rate), fiat=config.FIAT_CURRENCY)

    reference = await fetch_reference_rate(config.SETTLEMENT_ASSET, config.FIAT_CURRENCY)
    if reference is not None:
        await notifier.send("rate_reference", asset=config.SETTLEMENT_ASSET,
                            reference=fmt_fiat(reference), fiat=config.FIAT_CURRENCY)
