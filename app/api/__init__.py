# app/api/__init__.py
"""
🌐 REST API (FastAPI)

Сюда ходит мини-приложение: каталог, избранное, история, статистика.
"""

from .app import create_app

__all__ = ["create_app"]
