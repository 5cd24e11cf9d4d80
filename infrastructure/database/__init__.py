# infrastructure/database/__init__.py
"""
🗄️ DATABASE ИНИЦИАЛИЗАЦИЯ

Экспортируем все нужные функции и объекты.
"""

from infrastructure.database.base import (
    init_engine,
    init_db,
    close_db,
)
from infrastructure.database.models import Base

__all__ = [
    "Base",
    "init_engine",
    "init_db",
    "close_db",
]
