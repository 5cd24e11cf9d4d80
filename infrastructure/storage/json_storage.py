# infrastructure/storage/json_storage.py
"""
📁 JSON ХРАНИЛИЩЕ

Всё лежит в папке data/:
- products.json  - список товаров
- users.json     - {user_id: профиль}
- stats.json     - просмотры и посещения по дням

Подходит для маленького магазина и для разработки.
Запись атомарная: пишем во временный файл и подменяем.
"""

import asyncio
import json
import os
from datetime import date, timedelta
from pathlib import Path
from typing import Any, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

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
    new_product_id,
    push_history,
    utcnow,
)
from infrastructure.storage.base import Storage, sort_products

logger = structlog.get_logger()


def _empty_stats() -> dict:
    return {"totalViews": 0, "popularProducts": {}, "dailyStats": {}}


class JsonFileStorage(Storage):
    """Хранилище на JSON файлах."""

    name = "json"

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self.products_file = self.data_dir / "products.json"
        self.users_file = self.data_dir / "users.json"
        self.stats_file = self.data_dir / "stats.json"
        # read-modify-write циклы не должны перемешиваться
        self._lock = asyncio.Lock()

    # ==========================================
    # НИЗКОУРОВНЕВЫЕ ОПЕРАЦИИ С ФАЙЛАМИ
    # ==========================================

    async def init(self) -> None:
        """Создаём папку и пустые файлы если их нет."""

        defaults = {
            self.products_file: [],
            self.users_file: {},
            self.stats_file: _empty_stats(),
        }

        def _create():
            self.data_dir.mkdir(parents=True, exist_ok=True)
            for path, default in defaults.items():
                if not path.exists():
                    self._write_sync(path, default)

        try:
            await asyncio.to_thread(_create)
        except OSError as e:
            logger.error("json_storage_init_failed", data_dir=str(self.data_dir), error=str(e))
            raise PersistenceError(f"Не удалось создать {self.data_dir}: {e}") from e

        logger.info("json_storage_ready", data_dir=str(self.data_dir))

    @staticmethod
    def _write_sync(path: Path, data: Any) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)

    async def _read(self, path: Path, default: Any) -> Any:
        def _load():
            if not path.exists():
                return default
            with open(path, encoding="utf-8") as f:
                return json.load(f)

        try:
            return await asyncio.to_thread(_load)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("json_read_failed", file=str(path), error=str(e))
            raise PersistenceError(f"Ошибка чтения {path.name}: {e}") from e

    async def _write(self, path: Path, data: Any) -> None:
        try:
            await asyncio.to_thread(self._write_sync, path, data)
        except (OSError, TypeError) as e:
            logger.error("json_write_failed", file=str(path), error=str(e))
            raise PersistenceError(f"Ошибка записи {path.name}: {e}") from e

    async def _load_products(self) -> List[Product]:
        raw = await self._read(self.products_file, [])
        try:
            return [Product.model_validate(item) for item in raw]
        except PydanticValidationError as e:
            logger.error("json_products_corrupted", error=str(e))
            raise PersistenceError(f"Повреждён products.json: {e}") from e

    async def _save_products(self, products: List[Product]) -> None:
        await self._write(self.products_file, [p.to_json() for p in products])

    async def _load_users(self) -> dict:
        return await self._read(self.users_file, {})

    # ==========================================
    # PRODUCTS
    # ==========================================

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        for product in await self._load_products():
            if product.id == product_id:
                return product
        return None

    async def list_products(self) -> List[Product]:
        return await self._load_products()

    async def create_product(self, fields: ProductFields) -> Product:
        async with self._lock:
            products = await self._load_products()
            product = Product(id=new_product_id(), **fields.model_dump())
            products.append(product)
            await self._save_products(products)

        logger.info("product_created", product_id=product.id, name=product.name, storage=self.name)
        return product

    async def update_product(self, product_id: str, patch: ProductPatch) -> Optional[Product]:
        async with self._lock:
            products = await self._load_products()
            for index, product in enumerate(products):
                if product.id != product_id:
                    continue
                merged = product.model_dump()
                merged.update(patch.changes())
                merged["updated_at"] = utcnow()
                products[index] = Product.model_validate(merged)
                await self._save_products(products)
                logger.info("product_updated", product_id=product_id, storage=self.name)
                return products[index]

        return None

    async def delete_product(self, product_id: str) -> bool:
        async with self._lock:
            products = await self._load_products()
            remaining = [p for p in products if p.id != product_id]
            if len(remaining) == len(products):
                return False
            await self._save_products(remaining)

        logger.info("product_deleted", product_id=product_id, storage=self.name)
        return True

    async def filter_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[Product]:
        products = await self._load_products()

        if category:
            products = [p for p in products if p.category.value == category]

        if search:
            needle = search.lower()
            products = [
                p for p in products
                if needle in p.name.lower() or needle in p.description.lower()
            ]

        return sort_products(products, sort)

    async def increment_product_views(self, product_id: str) -> bool:
        async with self._lock:
            products = await self._load_products()
            product = next((p for p in products if p.id == product_id), None)
            if not product:
                return False
            product.views += 1
            await self._save_products(products)

            stats = await self._read(self.stats_file, _empty_stats())
            today = self._today(stats)
            stats["totalViews"] = stats.get("totalViews", 0) + 1
            today["views"] += 1
            popular = stats.setdefault("popularProducts", {})
            popular[product_id] = popular.get(product_id, 0) + 1
            await self._write(self.stats_file, stats)

        return True

    # ==========================================
    # USERS
    # ==========================================

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        users = await self._load_users()
        raw = users.get(user_id)
        return UserProfile.model_validate(raw) if raw else None

    async def list_users(self) -> List[UserProfile]:
        users = await self._load_users()
        return [UserProfile.model_validate(raw) for raw in users.values()]

    async def upsert_user(self, user_id: str, data: UserUpdate) -> UserProfile:
        async with self._lock:
            users = await self._load_users()
            raw = users.get(user_id)
            if raw:
                user = UserProfile.model_validate(raw).model_copy(
                    update=data.model_dump(exclude_none=True)
                )
            else:
                user = UserProfile(id=user_id, **data.model_dump(exclude_none=True))
                logger.info("user_created", user_id=user_id, storage=self.name)
            users[user_id] = user.to_json()
            await self._write(self.users_file, users)
        return user

    async def _mutate_user(self, user_id: str, mutate) -> UserProfile:
        async with self._lock:
            users = await self._load_users()
            raw = users.get(user_id)
            user = UserProfile.model_validate(raw) if raw else UserProfile(id=user_id)
            mutate(user)
            users[user_id] = user.to_json()
            await self._write(self.users_file, users)
        return user

    async def add_to_favorites(self, user_id: str, product_id: str) -> List[str]:
        def _add(user: UserProfile):
            if product_id not in user.favorites:
                user.favorites.append(product_id)

        return (await self._mutate_user(user_id, _add)).favorites

    async def remove_from_favorites(self, user_id: str, product_id: str) -> List[str]:
        def _remove(user: UserProfile):
            user.favorites = [pid for pid in user.favorites if pid != product_id]

        return (await self._mutate_user(user_id, _remove)).favorites

    async def add_to_history(self, user_id: str, product_id: str) -> List[str]:
        def _push(user: UserProfile):
            user.view_history = push_history(user.view_history, product_id)

        return (await self._mutate_user(user_id, _push)).view_history

    # ==========================================
    # STATS
    # ==========================================

    @staticmethod
    def _today(stats: dict) -> dict:
        daily = stats.setdefault("dailyStats", {})
        today = daily.setdefault(date.today().isoformat(), {"views": 0, "users": []})
        if not isinstance(today.get("users"), list):
            today["users"] = list(today.get("users") or [])
        today.setdefault("views", 0)
        return today

    async def record_visit(self, user_id: str) -> None:
        async with self._lock:
            stats = await self._read(self.stats_file, _empty_stats())
            today = self._today(stats)
            if user_id not in today["users"]:
                today["users"].append(user_id)
                await self._write(self.stats_file, stats)

    async def get_stats(self) -> StoreStats:
        stats = await self._read(self.stats_file, _empty_stats())
        products = await self._load_products()
        users = await self._load_users()
        by_id = {p.id: p for p in products}

        popular = sorted(
            stats.get("popularProducts", {}).items(),
            key=lambda item: item[1],
            reverse=True,
        )
        top = [
            TopProduct(product=by_id[pid], views=views)
            for pid, views in popular
            if pid in by_id
        ][:5]

        daily = stats.get("dailyStats", {})
        last_7_days = []
        for offset in range(6, -1, -1):
            day = (date.today() - timedelta(days=offset)).isoformat()
            entry = daily.get(day) or {}
            visitors = entry.get("users")
            last_7_days.append(DayStats(
                date=day,
                views=entry.get("views", 0),
                users=len(visitors) if isinstance(visitors, list) else 0,
            ))

        return StoreStats(
            total_products=len(products),
            total_users=len(users),
            total_views=stats.get("totalViews", 0),
            top_products=top,
            last_7_days=last_7_days,
            categories=category_counts(products),
        )
