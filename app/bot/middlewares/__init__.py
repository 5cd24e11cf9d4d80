# app/bot/middlewares/__init__.py
"""
🔄 MIDDLEWARE (перехватчики)

Middleware срабатывают для КАЖДОГО сообщения и нажатия кнопки.
Сейчас используется только логирование.
"""

from .logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
