# app/bot/messenger.py
"""
Исходящие сообщения.

Движок диалогов не знает про aiogram.Bot - он пишет через Messenger.
В проде это BotMessenger, в тестах - простой фейк, который
запоминает что было отправлено.
"""

from typing import Optional, Protocol

from aiogram import Bot
from aiogram.types import InlineKeyboardMarkup


class Messenger(Protocol):

    async def send_message(
        self,
        chat_id: int,
        text: str,
        keyboard: Optional[InlineKeyboardMarkup] = None,
    ) -> None:
        ...

    async def send_photo_with_caption(
        self,
        chat_id: int,
        photo_url: str,
        caption: str,
        keyboard: Optional[InlineKeyboardMarkup] = None,
    ) -> None:
        ...


class BotMessenger:
    """Messenger поверх aiogram.Bot (parse_mode задан в DefaultBotProperties)."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_message(self, chat_id, text, keyboard=None):
        await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=keyboard)

    async def send_photo_with_caption(self, chat_id, photo_url, caption, keyboard=None):
        await self.bot.send_photo(chat_id=chat_id, photo=photo_url, caption=caption, reply_markup=keyboard)
