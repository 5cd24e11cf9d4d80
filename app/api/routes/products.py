# app/api/routes/products.py
"""
Каталог для мини-приложения: товары, просмотры, категории.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends

from app.api.dependencies import fail, get_storage, ok
from config.settings import config
from infrastructure.storage.base import Storage

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/config")
async def get_config():
    """Что фронтенду нужно знать заранее (ссылка на менеджера)."""
    return ok({"managerUsername": config.manager_username})


# ==========================================
# ТОВАРЫ
# ==========================================

@router.get("/products")
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    """
    GET /api/products?category=Hoodies&search=куртка&sort=price_asc

    sort: price_asc | price_desc | views | popular (по умолчанию новые сначала)
    """
    products = await storage.filter_products(category=category, search=search, sort=sort)
    return ok([p.to_json() for p in products], count=len(products))


@router.get("/products/{product_id}")
async def get_product(product_id: str, storage: Storage = Depends(get_storage)):
    product = await storage.get_product_by_id(product_id)
    if not product:
        return fail(404, "Товар не найден")
    return ok(product.to_json())


@router.post("/products/{product_id}/view")
async def register_view(product_id: str, storage: Storage = Depends(get_storage)):
    """Мини-приложение дёргает это при открытии карточки товара."""
    if not await storage.increment_product_views(product_id):
        return fail(404, "Товар не найден")

    logger.debug("product_view_registered", product_id=product_id)
    return ok(message="Просмотр зафиксирован")


# ==========================================
# КАТЕГОРИИ
# ==========================================

@router.get("/categories")
async def list_categories(storage: Storage = Depends(get_storage)):
    """Только категории, в которых есть товары (в порядке появления)."""
    products = await storage.list_products()
    categories = list(dict.fromkeys(p.category.value for p in products))
    return ok(categories)
