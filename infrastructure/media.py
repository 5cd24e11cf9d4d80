# infrastructure/media.py
"""
📸 ЗАГРУЗКА ФОТО

Админ присылает фото в Telegram, а каталогу нужен постоянный URL.
Поэтому:
1. Берём у Telegram ссылку на файл по file_id
2. Отдаём эту ссылку Cloudinary (он сам скачает)
3. Возвращаем secure_url из Cloudinary

cloudinary SDK синхронный, поэтому вызываем его в отдельном потоке.
"""

import asyncio
from typing import Protocol

import cloudinary
import cloudinary.uploader
import structlog
from aiogram import Bot

from app.errors import UploadError
from config.settings import Settings

logger = structlog.get_logger()

# Ограничиваем размер и отдаём WebP где браузер умеет
UPLOAD_TRANSFORMATION = [
    {"width": 1200, "height": 1200, "crop": "limit"},
    {"quality": "auto"},
    {"fetch_format": "auto"},
]


class MediaUploader(Protocol):
    """Порт загрузки фото: media_ref (Telegram file_id) → публичный URL."""

    async def upload_photo(self, media_ref: str) -> str:
        ...


class CloudinaryUploader:
    """Загружает фото из Telegram в Cloudinary."""

    def __init__(self, bot: Bot, settings: Settings):
        self.bot = bot
        self.folder = settings.cloudinary_folder

        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    async def telegram_file_url(self, file_id: str) -> str:
        file = await self.bot.get_file(file_id)
        return f"https://api.telegram.org/file/bot{self.bot.token}/{file.file_path}"

    async def upload_photo(self, media_ref: str) -> str:
        try:
            source_url = await self.telegram_file_url(media_ref)
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                source_url,
                folder=self.folder,
                resource_type="image",
                transformation=UPLOAD_TRANSFORMATION,
            )
        except Exception as e:
            logger.error("photo_upload_failed", file_id=media_ref, error=str(e))
            raise UploadError(f"Не удалось загрузить фото: {e}") from e

        url = result.get("secure_url")
        if not url:
            logger.error("photo_upload_no_url", file_id=media_ref, result=result)
            raise UploadError("Cloudinary не вернул ссылку на фото")

        logger.info("photo_uploaded", file_id=media_ref, url=url)
        return url
