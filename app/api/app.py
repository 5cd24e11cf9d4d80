# app/api/app.py
"""
FastAPI приложение для мини-приложения магазина.

FastAPI = веб-фреймворк для создания REST API.

Мини-приложение (каталог в Telegram) ходит сюда за товарами,
избранным и историей просмотров. Хранилище то же, что у бота.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.dependencies import fail
from app.api.routes import admin_router, products_router, users_router
from app.errors import PersistenceError
from config.settings import config
from infrastructure.storage.base import Storage

logger = structlog.get_logger()

API_VERSION = "1.0.0"


def create_app(storage: Storage) -> FastAPI:
    """
    Собирает приложение вокруг готового хранилища.

    Хранилище инициализирует и закрывает main.py, потому что
    оно общее с ботом.
    """

    app = FastAPI(
        title="Clothing Shop API",
        description="API каталога для Telegram мини-приложения",
        version=API_VERSION,
    )
    app.state.storage = storage

    # ==========================================
    # CORS (фронтенд живёт на другом домене)
    # ==========================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.frontend_url] if config.frontend_url != "*" else ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==========================================
    # ОШИБКИ ХРАНИЛИЩА → 500
    # ==========================================

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("api_storage_error", path=request.url.path, error=str(exc))
        return fail(500, "Ошибка хранилища")

    # ==========================================
    # ENDPOINT: Health check
    # ==========================================

    @app.get("/")
    async def health_check():
        """
        Проверка что API живой.

        GET / → {"status": "ok", "service": "Clothing Shop API", ...}
        """
        return {
            "status": "ok",
            "service": "Clothing Shop API",
            "version": API_VERSION,
            "storage": storage.name,
        }

    app.include_router(products_router)
    app.include_router(users_router)
    app.include_router(admin_router)

    return app
