# app/bot/conversation/validators.py
"""
Проверки ввода, общие для мастера добавления и редактирования.
"""

import math
from typing import Optional

from app.errors import ValidationError
from app.models import MAX_PRICE, NAME_MAX_LENGTH, Category

CREATE_CATEGORY_PREFIX = "cat_"
EDIT_CATEGORY_PREFIX = "editcat_"


def require_text(text: Optional[str], field_name: str, max_length: Optional[int] = None) -> str:
    """Непустой текст (пробелы по краям обрезаем)."""
    value = (text or "").strip()
    if not value:
        raise ValidationError(f"{field_name} не может быть пустым")
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field_name} длиннее {max_length} символов")
    return value


def parse_name(text: Optional[str]) -> str:
    return require_text(text, "Название", max_length=NAME_MAX_LENGTH)


def parse_price(text: Optional[str]) -> float:
    """
    Цена: число больше нуля.

    "2990" → 2990.0, "1499,50" → 1499.5
    "abc", "0", "-5", "inf", "1e15" → ValidationError
    """
    raw = (text or "").strip().replace(" ", "").replace(",", ".")
    try:
        price = float(raw)
    except ValueError:
        raise ValidationError("Цена должна быть числом") from None

    if not math.isfinite(price) or price <= 0:
        raise ValidationError("Цена должна быть больше нуля")
    if price >= MAX_PRICE:
        raise ValidationError("Слишком большая цена")

    return price


def parse_category_token(token: str, prefix: str) -> Category:
    """
    "cat_Hoodies" → Category.HOODIES

    Категорию принимаем только с кнопки, свободный текст не подходит.
    """
    if not token.startswith(prefix):
        raise ValidationError("Выберите категорию кнопкой")

    try:
        return Category(token[len(prefix):])
    except ValueError:
        raise ValidationError("Такой категории нет") from None
