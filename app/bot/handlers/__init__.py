# app/bot/handlers/__init__.py
"""
🤖 BOT HANDLERS (обработчики команд)

Порядок важен:
1. common /start и /help (доступны всем)
2. admin (команды, шаги мастеров, кнопки)
3. common fallback (всё остальное)
"""

from aiogram import Router

from . import admin, common

# ==========================================
# СОЗДАЁМ MAIN ROUTER
# ==========================================

main_router = Router()

main_router.include_router(common.router)
main_router.include_router(admin.router)
main_router.include_router(common.fallback_router)

__all__ = ["main_router"]
