# infrastructure/__init__.py
"""Инфраструктура приложения: логирование, хранилища, загрузка фото."""

from .logger import logger, setup_logging

__all__ = [
    "logger",
    "setup_logging",
]
