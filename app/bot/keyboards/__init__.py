# app/bot/keyboards/__init__.py
"""Инициализация клавиатур."""

from .admin import (
    category_keyboard,
    delete_confirmation_keyboard,
    edit_category_keyboard,
    edit_menu_keyboard,
    product_card_keyboard,
)
from .client import shop_keyboard

__all__ = [
    "category_keyboard",
    "delete_confirmation_keyboard",
    "edit_category_keyboard",
    "edit_menu_keyboard",
    "product_card_keyboard",
    "shop_keyboard",
]
