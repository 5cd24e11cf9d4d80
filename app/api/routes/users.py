# app/api/routes/users.py
"""
Профиль покупателя: избранное и история просмотров.

user_id - Telegram id покупателя строкой (его отдаёт Telegram WebApp).
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends

from app.api.dependencies import fail, get_storage, ok
from app.models import UserUpdate
from infrastructure.storage.base import Storage

logger = structlog.get_logger()

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}")
async def get_user(user_id: str, storage: Storage = Depends(get_storage)):
    user = await storage.get_user(user_id)
    if not user:
        return fail(404, "Пользователь не найден")
    return ok(user.to_json())


@router.post("/{user_id}")
async def upsert_user(
    user_id: str,
    data: Optional[UserUpdate] = None,
    storage: Storage = Depends(get_storage),
):
    """Вызывается при открытии мини-приложения: сохраняем профиль и отмечаем визит."""
    user = await storage.upsert_user(user_id, data or UserUpdate())
    await storage.record_visit(user_id)

    logger.info("user_visit", user_id=user_id)
    return ok(user.to_json())


# ==========================================
# ИЗБРАННОЕ
# ==========================================

@router.get("/{user_id}/favorites")
async def get_favorites(user_id: str, storage: Storage = Depends(get_storage)):
    products = await storage.get_favorites(user_id)
    return ok([p.to_json() for p in products])


@router.post("/{user_id}/favorites/{product_id}")
async def add_favorite(user_id: str, product_id: str, storage: Storage = Depends(get_storage)):
    favorites = await storage.add_to_favorites(user_id, product_id)
    logger.info("favorite_added", user_id=user_id, product_id=product_id)
    return ok(favorites, message="Добавлено в избранное")


@router.delete("/{user_id}/favorites/{product_id}")
async def remove_favorite(user_id: str, product_id: str, storage: Storage = Depends(get_storage)):
    favorites = await storage.remove_from_favorites(user_id, product_id)
    logger.info("favorite_removed", user_id=user_id, product_id=product_id)
    return ok(favorites, message="Удалено из избранного")


# ==========================================
# ИСТОРИЯ ПРОСМОТРОВ
# ==========================================

@router.get("/{user_id}/history")
async def get_history(user_id: str, storage: Storage = Depends(get_storage)):
    products = await storage.get_history(user_id)
    return ok([p.to_json() for p in products])


@router.post("/{user_id}/history/{product_id}")
async def add_history(user_id: str, product_id: str, storage: Storage = Depends(get_storage)):
    history = await storage.add_to_history(user_id, product_id)
    return ok(history)
