# app/api/routes/__init__.py
"""Роуты REST API мини-приложения."""

from .admin import router as admin_router
from .products import router as products_router
from .users import router as users_router

__all__ = ["admin_router", "products_router", "users_router"]
