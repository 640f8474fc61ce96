# utils/keyboards.py
from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from utils.texts import language_map, t

CHECK_BALANCE = "check_balance"
CLEAR_BALANCE = "clear_balance"
CLEAR_SESSION = "clear_session"
SELECT_LANGUAGE = "language"


def build_menu_kb(lang: str, exchanges) -> InlineKeyboardMarkup:
    exchange_row = [
        InlineKeyboardButton(f"{name.capitalize()} ✅", callback_data=f"SELECT_{name}")
        for name in exchanges
    ]
    actions_row = [
        InlineKeyboardButton(f"{t(lang, 'check_daily_balance')} ✅", callback_data=f"SELECT_{CHECK_BALANCE}"),
        InlineKeyboardButton(f"{t(lang, 'clear_daily_balance')} ✅", callback_data=f"SELECT_{CLEAR_BALANCE}"),
    ]
    return InlineKeyboardMarkup([
        exchange_row,
        actions_row,
        [InlineKeyboardButton(f"{t(lang, 'select_language')} ✅", callback_data=f"SELECT_{SELECT_LANGUAGE}")],
        [InlineKeyboardButton(f"{t(lang, 'clear_session')} ❌", callback_data=f"SELECT_{CLEAR_SESSION}")],
    ])


def build_lang_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(label, callback_data=f"SET_LANG_{code}")]
        for code, label in language_map.items()
    ])
