# infrastructure/storage/__init__.py
"""
🗄️ ВЫБОР ХРАНИЛИЩА

STORAGE_BACKEND=json      → папка data/ с JSON файлами
STORAGE_BACKEND=database  → SQLAlchemy (DATABASE_URL)
"""

from config.settings import Settings
from infrastructure.storage.base import Storage
from infrastructure.storage.database_storage import DatabaseStorage
from infrastructure.storage.json_storage import JsonFileStorage


def create_storage(settings: Settings) -> Storage:
    """Создаёт хранилище по настройкам (ещё без init())."""
    if settings.storage_backend == "database":
        return DatabaseStorage(settings.async_database_url)
    return JsonFileStorage(settings.data_dir)


__all__ = [
    "Storage",
    "JsonFileStorage",
    "DatabaseStorage",
    "create_storage",
]
