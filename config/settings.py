# config/settings.py
"""
Settings файл - здесь живут все настройки приложения.

Логика: когда приложение запускается, оно читает .env файл
и создает объект 'config' со всеми необходимыми значениями.

Если какое-то значение из .env потеряется или будет неправильного типа,
Pydantic сразу выдаст ошибку и подскажет что не так.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from typing import Annotated, List, Literal


class Settings(BaseSettings):
    """
    Основной класс настроек.

    BaseSettings = специальный класс Pydantic который:
    1. Автоматически читает .env файл
    2. Валидирует типы (BOT_TOKEN должен быть str, API_PORT должен быть int)
    3. Выдает ошибку если обязательное поле пусто
    """

    # ==========================================
    # TELEGRAM BOT
    # ==========================================
    bot_token: str = ""
    # ADMIN_IDS=123456789,987654321
    admin_ids: Annotated[List[int], NoDecode] = []
    manager_username: str = "manager"
    webapp_url: str = ""

    # ==========================================
    # STORAGE
    # ==========================================
    storage_backend: Literal["json", "database"] = "json"
    data_dir: str = "data"
    database_url: str = "sqlite+aiosqlite:///./data/shop.db"

    # ==========================================
    # CLOUDINARY (хостинг фото)
    # ==========================================
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "clothing-shop"

    # ==========================================
    # ДИАЛОГИ АДМИНА
    # ==========================================
    # 0 = незаконченные мастера живут до перезапуска
    conversation_ttl_minutes: int = 0

    # ==========================================
    # API
    # ==========================================
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    frontend_url: str = "*"

    # ==========================================
    # ENVIRONMENT
    # ==========================================
    environment: Literal["development", "production"] = "development"
    debug: bool = True

    # Конфигурация Pydantic
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator("admin_ids", mode="before")
    @classmethod
    def split_admin_ids(cls, value):
        """ADMIN_IDS приходит строкой через запятую"""
        if isinstance(value, str):
            return [int(part) for part in value.split(",") if part.strip()]
        if isinstance(value, int):
            return [value]
        return value

    @property
    def async_database_url(self) -> str:
        """Convert standard PostgreSQL URL to asyncpg format"""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if "sslmode=disable" in url:
            url = url.replace("?sslmode=disable", "")
        return url

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )

    def is_admin(self, user_id: int) -> bool:
        """Проверка доступа к админ-панели (список ADMIN_IDS)."""
        return user_id in self.admin_ids


config = Settings()
