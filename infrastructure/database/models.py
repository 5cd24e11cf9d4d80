# infrastructure/database/models.py
"""
Здесь мы описываем структуру таблиц в базе данных.
SQLAlchemy автоматически создаст эти таблицы при первом запуске.

Каждый класс = одна таблица в БД
Каждое поле класса = один столбец в таблице
"""

from sqlalchemy import (
    Integer,       # Целые числа
    String,        # Текст фиксированной длины
    Text,          # Текст любой длины
    DateTime,      # Дата и время
    DECIMAL,       # Числа с фиксированной точкой (для денег!)
    JSON,          # JSON данные (для массивов)
    Column         # Определение столбца
)

from sqlalchemy.orm import declarative_base

from app.models import utcnow


# Base = базовый класс для всех моделей
Base = declarative_base()


# ==========================================
# МОДЕЛЬ: ProductRow (Таблица products)
# ==========================================

class ProductRow(Base):
    """
    Таблица товаров.

    Фото хранятся списком URL в JSON колонке,
    порядок важен (первое фото = обложка).
    """
    __tablename__ = "products"

    id = Column(String(32), primary_key=True)

    name = Column(String(255), nullable=False)

    price = Column(DECIMAL(12, 2), nullable=False)

    description = Column(Text, nullable=False, default="")

    category = Column(String(32), nullable=False, index=True)

    photos = Column(JSON, nullable=False, default=list)

    views = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<ProductRow(id={self.id}, name={self.name})>"


# ==========================================
# МОДЕЛЬ: UserRow (Таблица users)
# ==========================================

class UserRow(Base):
    """
    Покупатели из мини-приложения.

    favorites и view_history - списки ID товаров.
    JSON колонки не отслеживают изменения внутри списка,
    поэтому всегда присваиваем новый список.
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    # Telegram ID (строкой, как приходит из мини-приложения)

    username = Column(String(255), nullable=True)

    first_name = Column(String(255), nullable=True)

    last_name = Column(String(255), nullable=True)

    favorites = Column(JSON, nullable=False, default=list)

    view_history = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<UserRow(id={self.id}, username={self.username})>"


# ==========================================
# МОДЕЛЬ: DailyStatRow (Таблица daily_stats)
# ==========================================

class DailyStatRow(Base):
    """Просмотры и уникальные посетители за день."""
    __tablename__ = "daily_stats"

    day = Column(String(10), primary_key=True)
    # "2024-05-01"

    views = Column(Integer, nullable=False, default=0)

    visitors = Column(JSON, nullable=False, default=list)
