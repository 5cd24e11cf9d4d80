# infrastructure/database/repositories.py
"""
Repository паттерн.

Вместо того чтобы писать:
    session.execute(select(...))
    session.commit()
везде в коде, мы создаем методы:
    repo.get_by_id("a1b2c3")
    repo.create(...)

Это делает код чище и безопаснее.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from .models import DailyStatRow, ProductRow, UserRow
from app.models import new_product_id, push_history, utcnow

logger = structlog.get_logger()


# ==========================================
# REPOSITORY: Product (работа с товарами)
# ==========================================

class ProductRepository:
    """
    Репозиторий для работы с товарами.
    Все CRUD операции с товарами идут через этот класс.
    """

    def __init__(self, session: AsyncSession):
        """При создании репозитория передаем сессию БД"""
        self.session = session

    async def get_by_id(self, product_id: str) -> Optional[ProductRow]:
        """
        Получить товар по ID.

        Пример:
            product = await repo.get_by_id("a1b2c3d4e5f6")
        """
        return await self.session.get(ProductRow, product_id)

    async def list_all(self) -> List[ProductRow]:
        stmt = select(ProductRow).order_by(ProductRow.created_at.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        name: str,
        price: float,
        description: str,
        category: str,
        photos: list
    ) -> ProductRow:
        """
        Создать товар.

        ID генерируем сами - он не меняется никогда.
        """
        product = ProductRow(
            id=new_product_id(),
            name=name,
            price=price,
            description=description,
            category=category,
            photos=list(photos),
            views=0,
            created_at=utcnow()
        )
        self.session.add(product)

        await self.session.commit()

        logger.info("product_created", product_id=product.id, name=name, storage="database")

        return product

    async def update(self, product_id: str, **changes) -> Optional[ProductRow]:
        """
        Обновить поля товара.

        Пример:
            product = await repo.update("a1b2c3", price=2990)
        """
        product = await self.get_by_id(product_id)
        if not product:
            return None

        for key, value in changes.items():
            setattr(product, key, value)
        product.updated_at = utcnow()

        await self.session.commit()

        logger.info("product_updated", product_id=product_id, fields=list(changes), storage="database")

        return product

    async def delete(self, product_id: str) -> bool:
        result = await self.session.execute(
            delete(ProductRow).where(ProductRow.id == product_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def filter(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None
    ) -> List[ProductRow]:
        """
        Каталог с фильтрами.

        Поиск без учёта регистра по названию и описанию.
        """
        stmt = select(ProductRow)

        if category:
            stmt = stmt.where(ProductRow.category == category)

        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                func.lower(ProductRow.name).like(pattern),
                func.lower(ProductRow.description).like(pattern)
            ))

        if sort == "price_asc":
            stmt = stmt.order_by(ProductRow.price.asc())
        elif sort == "price_desc":
            stmt = stmt.order_by(ProductRow.price.desc())
        elif sort in ("views", "popular"):
            stmt = stmt.order_by(ProductRow.views.desc())
        else:
            stmt = stmt.order_by(ProductRow.created_at.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def increment_views(self, product_id: str) -> bool:
        """Атомарно увеличивает счётчик просмотров на стороне БД."""
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(views=ProductRow.views + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def top_by_views(self, limit: int = 5) -> List[ProductRow]:
        stmt = (
            select(ProductRow)
            .where(ProductRow.views > 0)
            .order_by(ProductRow.views.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def total_views(self) -> int:
        result = await self.session.execute(select(func.coalesce(func.sum(ProductRow.views), 0)))
        return int(result.scalar_one())


# ==========================================
# REPOSITORY: User (работа с пользователями)
# ==========================================

class UserRepository:
    """
    Репозиторий для работы с пользователями мини-приложения.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[UserRow]:
        return await self.session.get(UserRow, user_id)

    async def list_all(self) -> List[UserRow]:
        result = await self.session.execute(select(UserRow))
        return list(result.scalars().all())

    async def get_or_create(self, user_id: str) -> UserRow:
        """
        Получить пользователя из БД, или создать если его нет.
        Коммит делает вызывающий метод.

        Если параллельный запрос успел создать того же пользователя,
        INSERT падает с IntegrityError: откатываемся и читаем его строку.
        """
        user = await self.get_by_id(user_id)
        if user:
            return user

        user = UserRow(
            id=user_id,
            favorites=[],
            view_history=[],
            created_at=utcnow()
        )
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            logger.info("user_created_concurrently", user_id=user_id, storage="database")
            return await self.get_by_id(user_id)

        logger.info("user_created", user_id=user_id, storage="database")
        return user

    async def upsert(self, user_id: str, **fields) -> UserRow:
        user = await self.get_or_create(user_id)
        for key, value in fields.items():
            setattr(user, key, value)

        await self.session.commit()
        return user

    async def add_favorite(self, user_id: str, product_id: str) -> UserRow:
        user = await self.get_or_create(user_id)
        favorites = list(user.favorites or [])
        if product_id not in favorites:
            favorites.append(product_id)
            user.favorites = favorites

        await self.session.commit()
        return user

    async def remove_favorite(self, user_id: str, product_id: str) -> UserRow:
        user = await self.get_or_create(user_id)
        user.favorites = [pid for pid in (user.favorites or []) if pid != product_id]

        await self.session.commit()
        return user

    async def push_history(self, user_id: str, product_id: str) -> UserRow:
        user = await self.get_or_create(user_id)
        user.view_history = push_history(list(user.view_history or []), product_id)

        await self.session.commit()
        return user


# ==========================================
# REPOSITORY: DailyStat (статистика по дням)
# ==========================================

class DailyStatRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _create_day(self, day: str) -> None:
        """Создаёт строку дня; строку, созданную параллельно, не трогаем."""
        self.session.add(DailyStatRow(day=day, views=0, visitors=[]))
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()

    async def _today(self) -> DailyStatRow:
        day = date.today().isoformat()
        row = await self.session.get(DailyStatRow, day)
        if not row:
            await self._create_day(day)
            row = await self.session.get(DailyStatRow, day)
        return row

    async def add_view(self) -> None:
        day = date.today().isoformat()
        stmt = (
            update(DailyStatRow)
            .where(DailyStatRow.day == day)
            .values(views=DailyStatRow.views + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            await self._create_day(day)
            await self.session.execute(stmt)
        await self.session.commit()

    async def add_visitor(self, user_id: str) -> None:
        row = await self._today()
        visitors = list(row.visitors or [])
        if user_id not in visitors:
            row.visitors = visitors + [user_id]
            await self.session.commit()

    async def get_days(self, days: List[str]) -> List[DailyStatRow]:
        stmt = select(DailyStatRow).where(DailyStatRow.day.in_(days))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
