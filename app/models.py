# app/models.py
"""
📊 МОДЕЛИ ДАННЫХ (Pydantic)

Общие модели, которыми обмениваются бот, API и хранилища:
- Category (фиксированный список категорий)
- Product (товар)
- ProductFields / ProductPatch (данные для создания / изменения)
- UserProfile (покупатель из мини-приложения)
- StoreStats (статистика для админа)

В JSON файлы и в ответы API поля пишутся в camelCase
(createdAt, viewHistory...), как их ждёт фронтенд.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ==========================================
# КАТЕГОРИИ
# ==========================================

class Category(str, Enum):
    """Категории товаров. Других не бывает."""

    FOOTWEAR = "Footwear"
    HOODIES = "Hoodies"
    T_SHIRTS = "T-Shirts"
    ACCESSORIES = "Accessories"
    JEANS = "Jeans"
    HEADWEAR = "Headwear"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    Category.FOOTWEAR: "👟 Обувь",
    Category.HOODIES: "👕 Худи",
    Category.T_SHIRTS: "👔 Футболки",
    Category.ACCESSORIES: "🎒 Аксессуары",
    Category.JEANS: "👖 Джинсы",
    Category.HEADWEAR: "🧢 Головные уборы",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_product_id() -> str:
    return uuid.uuid4().hex[:12]


class CamelModel(BaseModel):
    """Базовая модель: python-имена внутри, camelCase снаружи."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ==========================================
# ТОВАР
# ==========================================

# Пределы колонок products.name String(255) и products.price DECIMAL(12, 2)
NAME_MAX_LENGTH = 255
MAX_PRICE = 10 ** 10


class ProductFields(CamelModel):
    """
    Данные для создания товара.

    Валидация гарантирует, что в хранилище не попадёт
    товар без фото или с ценой <= 0.
    """

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    price: float = Field(gt=0, lt=MAX_PRICE)
    description: str
    category: Category
    photos: List[str] = Field(min_length=1)


class ProductPatch(CamelModel):
    """Частичное обновление товара (None = поле не трогаем)."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    price: Optional[float] = Field(default=None, gt=0, lt=MAX_PRICE)
    description: Optional[str] = None
    category: Optional[Category] = None
    photos: Optional[List[str]] = Field(default=None, min_length=1)

    def changes(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class Product(ProductFields):
    """Товар в каталоге."""

    id: str
    views: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def editable_fields(self) -> ProductPatch:
        """Все редактируемые поля одним патчем."""
        return ProductPatch(
            name=self.name,
            price=self.price,
            description=self.description,
            category=self.category,
            photos=list(self.photos),
        )


# ==========================================
# ПОЛЬЗОВАТЕЛЬ МИНИ-ПРИЛОЖЕНИЯ
# ==========================================

HISTORY_LIMIT = 50


class UserProfile(CamelModel):
    """Покупатель: избранное и история просмотров."""

    id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    favorites: List[str] = Field(default_factory=list)
    view_history: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)


class UserUpdate(CamelModel):
    """Что мини-приложение присылает в POST /api/users/{id}."""

    model_config = ConfigDict(extra="ignore")

    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


def push_history(history: List[str], product_id: str) -> List[str]:
    """Товар в начало истории, без дублей, не больше HISTORY_LIMIT."""
    updated = [product_id] + [pid for pid in history if pid != product_id]
    return updated[:HISTORY_LIMIT]


# ==========================================
# СТАТИСТИКА
# ==========================================

class TopProduct(CamelModel):
    product: Product
    views: int


class DayStats(CamelModel):
    date: str
    views: int = 0
    users: int = 0


class StoreStats(CamelModel):
    total_products: int
    total_users: int
    total_views: int
    top_products: List[TopProduct] = Field(default_factory=list)
    last_7_days: List[DayStats] = Field(default_factory=list, alias="last7Days")
    categories: Dict[str, int] = Field(default_factory=dict)


def category_counts(products: List[Product]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for product in products:
        counts[product.category.value] = counts.get(product.category.value, 0) + 1
    return counts
