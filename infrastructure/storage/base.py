# infrastructure/storage/base.py
"""
🗄️ ХРАНИЛИЩЕ (порт)

Один интерфейс - две реализации:
- JsonFileStorage  (папка data/ с JSON файлами)
- DatabaseStorage  (SQLAlchemy: SQLite или PostgreSQL)

Бот и API работают только через этот интерфейс и не знают,
где на самом деле лежат товары.

Все реализации при сбое кидают PersistenceError.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.models import Product, ProductFields, ProductPatch, StoreStats, UserProfile, UserUpdate


class Storage(ABC):
    """Абстрактное хранилище товаров, пользователей и статистики."""

    name: str = "abstract"

    async def init(self) -> None:
        """Подготовить хранилище (создать файлы / таблицы)."""

    async def close(self) -> None:
        """Освободить ресурсы."""

    # ========== PRODUCTS ==========

    @abstractmethod
    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        ...

    @abstractmethod
    async def list_products(self) -> List[Product]:
        ...

    @abstractmethod
    async def create_product(self, fields: ProductFields) -> Product:
        ...

    @abstractmethod
    async def update_product(self, product_id: str, patch: ProductPatch) -> Optional[Product]:
        """Вернёт None если товара нет."""

    @abstractmethod
    async def delete_product(self, product_id: str) -> bool:
        ...

    @abstractmethod
    async def filter_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[Product]:
        """
        Каталог для мини-приложения.

        sort: price_asc | price_desc | views (popular) | по умолчанию новые сначала
        """

    @abstractmethod
    async def increment_product_views(self, product_id: str) -> bool:
        ...

    # ========== USERS ==========

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        ...

    @abstractmethod
    async def upsert_user(self, user_id: str, data: UserUpdate) -> UserProfile:
        ...

    @abstractmethod
    async def list_users(self) -> List[UserProfile]:
        ...

    @abstractmethod
    async def add_to_favorites(self, user_id: str, product_id: str) -> List[str]:
        ...

    @abstractmethod
    async def remove_from_favorites(self, user_id: str, product_id: str) -> List[str]:
        ...

    @abstractmethod
    async def add_to_history(self, user_id: str, product_id: str) -> List[str]:
        ...

    async def get_favorites(self, user_id: str) -> List[Product]:
        """Избранные товары (удалённые пропускаем)."""
        user = await self.get_user(user_id)
        if not user:
            return []
        products = await self.list_products()
        return [p for p in products if p.id in user.favorites]

    async def get_history(self, user_id: str) -> List[Product]:
        """История просмотров, свежие сначала (удалённые пропускаем)."""
        user = await self.get_user(user_id)
        if not user:
            return []
        by_id = {p.id: p for p in await self.list_products()}
        return [by_id[pid] for pid in user.view_history if pid in by_id]

    # ========== STATS ==========

    @abstractmethod
    async def record_visit(self, user_id: str) -> None:
        """Отметить что пользователь заходил сегодня."""

    @abstractmethod
    async def get_stats(self) -> StoreStats:
        ...


def sort_products(products: List[Product], sort: Optional[str]) -> List[Product]:
    if sort == "price_asc":
        return sorted(products, key=lambda p: p.price)
    if sort == "price_desc":
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort in ("views", "popular"):
        return sorted(products, key=lambda p: p.views, reverse=True)
    return sorted(products, key=lambda p: p.created_at, reverse=True)
