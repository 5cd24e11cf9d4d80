# app/bot/handlers/admin.py
"""
Обработчики админки.

Сами ничего не решают: превращают Message / CallbackQuery в события
и отдают их движку диалогов (engine приходит из workflow_data диспетчера).

Команды и кнопки от не-админов тоже идут в движок - он ответит отказом.
Обычный текст и фото от покупателей сюда не попадают (admin_only),
их ловит fallback из common.py.
"""

from aiogram import F, Router, types
from aiogram.filters import Command, CommandObject

from app.bot.conversation.engine import AdminConversationEngine
from app.bot.conversation.events import CommandEvent, PhotoEvent, SelectionEvent, TextEvent
from config.settings import config

import structlog

logger = structlog.get_logger()

router = Router()

ADMIN_COMMANDS = (
    "admin",
    "add_product",
    "edit_product",
    "done",
    "done_photos",
    "cancel",
    "list_products",
    "delete_product",
    "stats",
    "categories",
)


# ==========================================
# ФИЛЬТР: только админы
# ==========================================

admin_only = F.from_user.id.in_(config.admin_ids)


# ==========================================
# КОМАНДЫ
# ==========================================

@router.message(Command(*ADMIN_COMMANDS))
async def on_admin_command(message: types.Message, command: CommandObject, engine: AdminConversationEngine):
    """/add_product, /edit_product ID, /done ... → CommandEvent"""

    event = CommandEvent(
        chat_id=message.chat.id,
        sender_id=message.from_user.id,
        name=command.command,
        args=command.args or "",
    )

    try:
        await engine.handle_command(event)
    except Exception as e:
        logger.error("admin_command_error", command=command.command, error=str(e))
        await message.answer("❌ Произошла ошибка. Попробуйте ещё раз")


# ==========================================
# ТЕКСТ И ФОТО (шаги мастеров)
# ==========================================

@router.message(F.text & ~F.text.startswith("/"), admin_only)
async def on_admin_text(message: types.Message, engine: AdminConversationEngine):
    event = TextEvent(chat_id=message.chat.id, sender_id=message.from_user.id, text=message.text)

    try:
        await engine.handle_text(event)
    except Exception as e:
        logger.error("admin_text_error", error=str(e))
        await message.answer("❌ Произошла ошибка. Попробуйте ещё раз")


@router.message(F.photo, admin_only)
async def on_admin_photo(message: types.Message, engine: AdminConversationEngine):
    """Берём самый большой размер фото."""

    event = PhotoEvent(
        chat_id=message.chat.id,
        sender_id=message.from_user.id,
        media_ref=message.photo[-1].file_id,
    )

    try:
        await engine.handle_photo(event)
    except Exception as e:
        logger.error("admin_photo_error", error=str(e))
        await message.answer("❌ Ошибка обработки фото")


# ==========================================
# КНОПКИ
# ==========================================

@router.callback_query(F.data)
async def on_admin_selection(query: types.CallbackQuery, engine: AdminConversationEngine):
    # кнопка "нажата" сразу, чтобы не крутились часики
    await query.answer()

    chat_id = query.message.chat.id if query.message else query.from_user.id
    event = SelectionEvent(chat_id=chat_id, sender_id=query.from_user.id, token=query.data)

    try:
        await engine.handle_selection(event)
    except Exception as e:
        logger.error("admin_selection_error", token=query.data, error=str(e))
        if query.message:
            await query.message.answer("❌ Произошла ошибка. Попробуйте ещё раз")
