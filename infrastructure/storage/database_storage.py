# infrastructure/storage/database_storage.py
"""
🐘 ХРАНИЛИЩЕ В БД

Реализация Storage поверх SQLAlchemy репозиториев.
Каждая операция = своя сессия. Любая SQLAlchemyError
превращается в PersistenceError.
"""

from contextlib import asynccontextmanager
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from app.errors import PersistenceError
from app.models import (
    DayStats,
    Product,
    ProductFields,
    ProductPatch,
    StoreStats,
    TopProduct,
    UserProfile,
    UserUpdate,
    category_counts,
)
from infrastructure.database import base as db
from infrastructure.database.models import ProductRow, UserRow
from infrastructure.database.repositories import (
    DailyStatRepository,
    ProductRepository,
    UserRepository,
)
from infrastructure.storage.base import Storage

logger = structlog.get_logger()


def _to_product(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        price=float(row.price),
        description=row.description or "",
        category=row.category,
        photos=list(row.photos or []),
        views=row.views or 0,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_user(row: UserRow) -> UserProfile:
    return UserProfile(
        id=row.id,
        username=row.username,
        first_name=row.first_name,
        last_name=row.last_name,
        favorites=list(row.favorites or []),
        view_history=list(row.view_history or []),
        created_at=row.created_at,
    )


class DatabaseStorage(Storage):
    """Хранилище в SQL базе (SQLite / PostgreSQL)."""

    name = "database"

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._session_maker = None

    async def init(self) -> None:
        url = make_url(self.database_url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            # sqlite не создаёт папки сам
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        self._session_maker = db.init_engine(self.database_url, echo=self.echo)
        try:
            await db.init_db()
        except SQLAlchemyError as e:
            logger.error("database_init_failed", error=str(e))
            raise PersistenceError(f"Не удалось подключиться к БД: {e}") from e
        logger.info("database_storage_ready")

    async def close(self) -> None:
        await db.close_db()
        self._session_maker = None

    @asynccontextmanager
    async def _session(self, operation: str):
        if self._session_maker is None:
            raise PersistenceError("База данных не инициализирована")

        async with self._session_maker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("database_error", operation=operation, error=str(e))
                raise PersistenceError(f"Ошибка БД ({operation}): {e}") from e

    # ========== PRODUCTS ==========

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        async with self._session("get_product") as session:
            row = await ProductRepository(session).get_by_id(product_id)
            return _to_product(row) if row else None

    async def list_products(self) -> List[Product]:
        async with self._session("list_products") as session:
            return [_to_product(row) for row in await ProductRepository(session).list_all()]

    async def create_product(self, fields: ProductFields) -> Product:
        async with self._session("create_product") as session:
            row = await ProductRepository(session).create(
                name=fields.name,
                price=fields.price,
                description=fields.description,
                category=fields.category.value,
                photos=fields.photos,
            )
            return _to_product(row)

    async def update_product(self, product_id: str, patch: ProductPatch) -> Optional[Product]:
        async with self._session("update_product") as session:
            row = await ProductRepository(session).update(product_id, **patch.changes())
            return _to_product(row) if row else None

    async def delete_product(self, product_id: str) -> bool:
        async with self._session("delete_product") as session:
            deleted = await ProductRepository(session).delete(product_id)
        if deleted:
            logger.info("product_deleted", product_id=product_id, storage=self.name)
        return deleted

    async def filter_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[Product]:
        async with self._session("filter_products") as session:
            rows = await ProductRepository(session).filter(category, search, sort)
            return [_to_product(row) for row in rows]

    async def increment_product_views(self, product_id: str) -> bool:
        async with self._session("increment_views") as session:
            found = await ProductRepository(session).increment_views(product_id)
            if found:
                await DailyStatRepository(session).add_view()
            return found

    # ========== USERS ==========

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        async with self._session("get_user") as session:
            row = await UserRepository(session).get_by_id(user_id)
            return _to_user(row) if row else None

    async def list_users(self) -> List[UserProfile]:
        async with self._session("list_users") as session:
            return [_to_user(row) for row in await UserRepository(session).list_all()]

    async def upsert_user(self, user_id: str, data: UserUpdate) -> UserProfile:
        async with self._session("upsert_user") as session:
            row = await UserRepository(session).upsert(user_id, **data.model_dump(exclude_none=True))
            return _to_user(row)

    async def add_to_favorites(self, user_id: str, product_id: str) -> List[str]:
        async with self._session("add_favorite") as session:
            row = await UserRepository(session).add_favorite(user_id, product_id)
            return list(row.favorites)

    async def remove_from_favorites(self, user_id: str, product_id: str) -> List[str]:
        async with self._session("remove_favorite") as session:
            row = await UserRepository(session).remove_favorite(user_id, product_id)
            return list(row.favorites)

    async def add_to_history(self, user_id: str, product_id: str) -> List[str]:
        async with self._session("add_history") as session:
            row = await UserRepository(session).push_history(user_id, product_id)
            return list(row.view_history)

    # ========== STATS ==========

    async def record_visit(self, user_id: str) -> None:
        async with self._session("record_visit") as session:
            await DailyStatRepository(session).add_visitor(user_id)

    async def get_stats(self) -> StoreStats:
        days = [(date.today() - timedelta(days=offset)).isoformat() for offset in range(6, -1, -1)]

        async with self._session("get_stats") as session:
            products_repo = ProductRepository(session)
            products = [_to_product(row) for row in await products_repo.list_all()]
            top_rows = await products_repo.top_by_views(limit=5)
            total_views = await products_repo.total_views()
            users = await UserRepository(session).list_all()
            daily = {row.day: row for row in await DailyStatRepository(session).get_days(days)}

        return StoreStats(
            total_products=len(products),
            total_users=len(users),
            total_views=total_views,
            top_products=[TopProduct(product=_to_product(row), views=row.views) for row in top_rows],
            last_7_days=[
                DayStats(
                    date=day,
                    views=daily[day].views if day in daily else 0,
                    users=len(daily[day].visitors or []) if day in daily else 0,
                )
                for day in days
            ],
            categories=category_counts(products),
        )
