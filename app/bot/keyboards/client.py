# app/bot/keyboards/client.py
"""
Клавиатуры для покупателей.

Главная кнопка - открыть мини-приложение с каталогом.
"""

from typing import Optional

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, WebAppInfo


def shop_keyboard(webapp_url: str, manager_username: str) -> Optional[InlineKeyboardMarkup]:
    """
    Кнопки под приветствием:
    - "🛍️ Открыть магазин" (если задан WEBAPP_URL)
    - "💬 Менеджер" (ссылка на профиль менеджера)
    """
    buttons = []

    if webapp_url:
        buttons.append([InlineKeyboardButton(
            text="🛍️ Открыть магазин",
            web_app=WebAppInfo(url=webapp_url)
        )])

    if manager_username:
        buttons.append([InlineKeyboardButton(
            text="💬 Менеджер",
            url=f"https://t.me/{manager_username.lstrip('@')}"
        )])

    return InlineKeyboardMarkup(inline_keyboard=buttons) if buttons else None
