# app/bot/conversation/events.py
"""
Входящие события для движка диалогов.

Хендлеры aiogram превращают Message / CallbackQuery в эти
простые объекты, поэтому движок не зависит от Telegram и
его можно тестировать без живого бота.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextEvent:
    chat_id: int
    sender_id: int
    text: str


@dataclass(frozen=True)
class PhotoEvent:
    chat_id: int
    sender_id: int
    media_ref: str
    # Telegram file_id самого большого размера


@dataclass(frozen=True)
class SelectionEvent:
    chat_id: int
    sender_id: int
    token: str
    # callback_data кнопки


@dataclass(frozen=True)
class CommandEvent:
    chat_id: int
    sender_id: int
    name: str
    # без слэша: "add_product"
    args: str = ""
