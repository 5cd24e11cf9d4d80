# main.py
"""
🚀 ГЛАВНЫЙ ФАЙЛ ЗАПУСКА

Это точка входа - отсюда всё начинается!

Запускает одновременно:
- Telegram бота (админка + /start для покупателей)
- REST API для мини-приложения (FastAPI + uvicorn)

Оба работают с одним и тем же хранилищем.
"""

import asyncio

import structlog
import uvicorn
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from app.api import create_app
from app.bot.conversation.engine import AdminConversationEngine
from app.bot.conversation.store import ConversationStore
from app.bot.handlers import main_router
from app.bot.messenger import BotMessenger
from app.bot.middlewares import LoggingMiddleware
from config.settings import config
from infrastructure.logger import setup_logging
from infrastructure.media import CloudinaryUploader
from infrastructure.storage import create_storage

logger = structlog.get_logger()


# ==========================================
# 🤖 BOT STARTUP & SHUTDOWN
# ==========================================

async def on_startup(bot: Bot):
    """Уведомляем админов что бот живой (ошибки не блокируют запуск)."""

    logger.info("bot_starting", message="🤖 Бот стартует...")

    if not config.admin_ids:
        logger.warning("admin_ids_not_set", message="⚠️ ADMIN_IDS не установлен в .env, админка недоступна")
        return

    for admin_id in config.admin_ids:
        try:
            await bot.send_message(
                chat_id=admin_id,
                text="✅ <b>Бот запустился!</b>\n\nИспользуй /admin для управления магазином"
            )
        except Exception as e:
            logger.error("admin_notification_failed", admin_id=admin_id, error=str(e))


async def on_shutdown(bot: Bot):
    logger.info("bot_shutdown", message="🔴 Бот выключается...")

    try:
        await bot.session.close()
    except Exception as e:
        logger.error("bot_shutdown_error", error=str(e))


# ==========================================
# 🚀 ГЛАВНАЯ ФУНКЦИЯ ЗАПУСКА
# ==========================================

async def main():
    """
    Порядок:
    1. логирование и проверка .env
    2. хранилище (JSON или БД)
    3. бот, движок админки, диспетчер
    4. polling + uvicorn одновременно
    """

    setup_logging(debug=config.debug)
    logger.info("application_start", environment=config.environment, storage=config.storage_backend)

    if not config.bot_token:
        logger.error("bot_token_missing", message="❌ BOT_TOKEN не установлен в .env")
        raise ValueError("BOT_TOKEN не найден в переменных окружения")

    if not config.cloudinary_configured:
        logger.warning("cloudinary_not_configured", message="⚠️ Загрузка фото товаров работать не будет")

    # ========== ХРАНИЛИЩЕ ==========

    storage = create_storage(config)
    await storage.init()
    logger.info("storage_ready", storage=storage.name)

    # ========== БОТ И ДИСПЕТЧЕР ==========

    bot = Bot(
        token=config.bot_token,
        default=DefaultBotProperties(parse_mode="HTML")
    )

    engine = AdminConversationEngine(
        storage=storage,
        uploader=CloudinaryUploader(bot, config),
        messenger=BotMessenger(bot),
        store=ConversationStore(ttl_seconds=config.conversation_ttl_minutes * 60),
        is_authorized=config.is_admin,
    )

    # engine и shop_storage попадут в хендлеры как аргументы
    dp = Dispatcher(engine=engine, shop_storage=storage)

    dp.message.middleware(LoggingMiddleware())
    dp.callback_query.middleware(LoggingMiddleware())
    dp.include_router(main_router)

    await on_startup(bot)

    # ========== ЗАПУСК БОТА И API ОДНОВРЕМЕННО ==========

    async def run_bot():
        try:
            logger.info("polling_started", bot_username=f"@{(await bot.get_me()).username}")
            await dp.start_polling(bot)
        except asyncio.CancelledError:
            logger.info("polling_cancelled")
            raise
        except Exception as e:
            logger.error("bot_polling_error", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            await on_shutdown(bot)

    async def run_api():
        server = uvicorn.Server(uvicorn.Config(
            create_app(storage),
            host=config.api_host,
            port=config.api_port,
            log_level="info",
            access_log=True,
        ))
        logger.info("fastapi_starting", host=config.api_host, port=config.api_port)

        try:
            await server.serve()
        except Exception as e:
            logger.error("fastapi_error", error=str(e), error_type=type(e).__name__)
            raise

    try:
        await asyncio.gather(run_bot(), run_api())
    finally:
        await storage.close()
        logger.info("storage_closed", storage=storage.name)


# ==========================================
# 📌 ENTRY POINT (точка входа)
# ==========================================

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("app_interrupted", message="⛔ Приложение остановлено пользователем (Ctrl+C)")
    finally:
        logger.info("app_final_shutdown", message="👋 Приложение полностью выключено")
