# app/bot/keyboards/admin.py
"""
Клавиатуры для админа.

Все кнопки inline: нажатие приходит боту как callback_query
с callback_data, который движок диалогов разбирает как SelectionEvent.
"""

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from app.bot.conversation.records import EditField
from app.bot.conversation.validators import CREATE_CATEGORY_PREFIX, EDIT_CATEGORY_PREFIX
from app.models import Category

# ==========================================
# CALLBACK DATA
# ==========================================

EDIT_FIELD_PREFIX = "edit_"
EDIT_SAVE = "edit_done"
EDIT_CANCEL = "edit_cancel"

PRODUCT_EDIT_PREFIX = "product_edit:"
PRODUCT_DELETE_PREFIX = "product_delete:"
CONFIRM_DELETE_PREFIX = "confirm_delete:"
CANCEL_DELETE = "cancel_delete"

EDIT_FIELD_LABELS = {
    EditField.NAME: "📌 Название",
    EditField.PRICE: "💰 Цена",
    EditField.DESCRIPTION: "📝 Описание",
    EditField.CATEGORY: "🏷️ Категория",
    EditField.PHOTOS: "📸 Фото",
}


def category_keyboard(prefix: str = CREATE_CATEGORY_PREFIX) -> InlineKeyboardMarkup:
    """
    Меню категорий.

    prefix = "cat_" при добавлении, "editcat_" при редактировании
    """
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text=category.label, callback_data=f"{prefix}{category.value}")]
        for category in Category
    ])


def edit_category_keyboard() -> InlineKeyboardMarkup:
    return category_keyboard(EDIT_CATEGORY_PREFIX)


def edit_menu_keyboard() -> InlineKeyboardMarkup:
    """Меню редактирования: поле за полем, потом "Сохранить"."""

    buttons = [
        [InlineKeyboardButton(text=label, callback_data=f"{EDIT_FIELD_PREFIX}{edit_field.value}")]
        for edit_field, label in EDIT_FIELD_LABELS.items()
    ]
    buttons.append([InlineKeyboardButton(text="✅ Сохранить", callback_data=EDIT_SAVE)])
    buttons.append([InlineKeyboardButton(text="❌ Отмена", callback_data=EDIT_CANCEL)])

    return InlineKeyboardMarkup(inline_keyboard=buttons)


def product_card_keyboard(product_id: str) -> InlineKeyboardMarkup:
    """Кнопки под карточкой товара в /list_products."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="✏️ Редактировать", callback_data=f"{PRODUCT_EDIT_PREFIX}{product_id}")],
        [InlineKeyboardButton(text="🗑️ Удалить", callback_data=f"{PRODUCT_DELETE_PREFIX}{product_id}")],
    ])


def delete_confirmation_keyboard(product_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text="✅ Удалить", callback_data=f"{CONFIRM_DELETE_PREFIX}{product_id}"),
        InlineKeyboardButton(text="❌ Отмена", callback_data=CANCEL_DELETE),
    ]])
