# utils/notify.py
import logging
import os

from telegram.error import TelegramError

from utils.texts import t

log = logging.getLogger("notify")


class Notifier:
    """Отправка сообщений пользователю. Ошибки Telegram только логируются."""

    def __init__(self, bot, chat_id: int, lang: str = "en"):
        self.bot = bot
        self.chat_id = chat_id
        self.lang = lang

    async def send(self, key: str, reply_markup=None, **params) -> None:
        await self.send_text(t(self.lang, key, **params), reply_markup=reply_markup)

    async def send_text(self, text: str, reply_markup=None) -> None:
        try:
            await self.bot.send_message(chat_id=self.chat_id, text=text, reply_markup=reply_markup)
        except TelegramError as e:
            log.error(f"send_message to {self.chat_id} failed: {e}")

    async def send_photo(self, path: str) -> None:
        if not path or not os.path.exists(path):
            return
        try:
            with open(path, "rb") as f:
                await self.bot.send_photo(chat_id=self.chat_id, photo=f)
        except (TelegramError, OSError) as e:
            log.error(f"send_photo {path} to {self.chat_id} failed: {e}")
