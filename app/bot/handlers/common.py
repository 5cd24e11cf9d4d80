# app/bot/handlers/common.py
"""
Обработчики которые работают для всех пользователей.

Здесь:
- /start (регистрация покупателя + кнопка магазина)
- /help
- Fallback сообщения
"""

from aiogram import Router, types
from aiogram.filters import Command

from app.bot.keyboards.client import shop_keyboard
from app.errors import PersistenceError
from app.models import UserUpdate
from config.settings import config
from infrastructure.storage.base import Storage

import structlog

logger = structlog.get_logger()

router = Router()
fallback_router = Router()

WELCOME_TEXT = (
    "👋 Добро пожаловать в наш магазин!\n\n"
    "🛍️ Здесь вы найдете стильную одежду и обувь\n\n"
    "В мини-приложении:\n"
    "• 🏠 Каталог - все товары\n"
    "• ❤️ Избранное - понравившиеся товары\n"
    "• 📝 История - просмотренные товары\n"
    "• 💬 Менеджер - связь с нами"
)


# ==========================================
# КОМАНДА: /start
# ==========================================

@router.message(Command("start"))
async def cmd_start(message: types.Message, shop_storage: Storage):
    """
    Приветствие.

    Покупателя сохраняем в хранилище (как это делает мини-приложение),
    но если хранилище недоступно - всё равно здороваемся.
    """

    user = message.from_user
    user_id = str(user.id)

    try:
        await shop_storage.upsert_user(
            user_id,
            UserUpdate(username=user.username, first_name=user.first_name, last_name=user.last_name),
        )
        await shop_storage.record_visit(user_id)
    except PersistenceError as e:
        logger.error("start_user_save_failed", user_id=user.id, error=str(e))

    await message.answer(
        WELCOME_TEXT,
        reply_markup=shop_keyboard(config.webapp_url, config.manager_username),
    )

    if config.is_admin(user.id):
        await message.answer("🔧 Доступна админ-панель. Отправьте /admin")

    logger.info("start_command", user_id=user.id, username=user.username)


# ==========================================
# КОМАНДА: /help
# ==========================================

@router.message(Command("help"))
async def cmd_help(message: types.Message):
    """Справка по командам."""

    help_text = (
        "🤖 Доступные команды:\n\n"
        "/start - Главное меню\n"
        "/help - Эта справка\n\n"
        "Каталог открывается кнопкой \"🛍️ Открыть магазин\""
    )

    await message.answer(help_text)
    logger.info("help_command", user_id=message.from_user.id)


# ==========================================
# FALLBACK (ловушка для неизвестных сообщений)
# ==========================================

@fallback_router.message()
async def echo_or_unknown(message: types.Message):
    """
    Если ничего не сработало - этот обработчик.

    Это последняя ловушка для непонятных сообщений.
    """

    await message.answer(
        "🤔 Не понимаю что вы имеете в виду.\n\n"
        "Откройте магазин через /start или напишите /help"
    )

    logger.warning("unknown_message", user_id=message.from_user.id, text=message.text)
