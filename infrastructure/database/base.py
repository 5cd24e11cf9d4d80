# infrastructure/database/base.py
"""
🔌 ПОДКЛЮЧЕНИЕ К БД

Создаём async engine и фабрику сессий.

Engine создаётся через init_engine(url), а не при импорте,
чтобы тесты могли подключить свою базу (sqlite в памяти).
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from infrastructure.database.models import Base

logger = structlog.get_logger()

engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def init_engine(url: str, echo: bool = False) -> async_sessionmaker[AsyncSession]:
    """
    Создаёт engine и фабрику сессий.

    Пример:
        session_maker = init_engine("sqlite+aiosqlite:///./data/shop.db")
        async with session_maker() as session:
            ...
    """
    global engine, async_session_maker

    kwargs = {"echo": echo}
    if url.startswith("sqlite") and ":memory:" in url:
        # одна общая in-memory база на все сессии
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(url, **kwargs)
    async_session_maker = async_sessionmaker(engine, expire_on_commit=False)
    return async_session_maker


async def init_db() -> None:
    """Создаём таблицы в БД если их нет."""
    if engine is None:
        raise RuntimeError("init_engine() должен быть вызван до init_db()")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("database_tables_ready")


async def close_db() -> None:
    """Закрываем соединения с БД."""
    global engine, async_session_maker

    if engine is not None:
        await engine.dispose()
        logger.info("database_closed")

    engine = None
    async_session_maker = None
