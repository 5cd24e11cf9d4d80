# app/bot/middlewares/logging.py
"""
Middleware для логирования всех входящих сообщений и нажатий кнопок.
"""

from typing import Any, Awaitable, Callable, Dict, Union

import structlog
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message

from config.settings import config

logger = structlog.get_logger()

Event = Union[Message, CallbackQuery]


def describe_message(message: Message) -> str:
    """Короткое описание содержимого для лога."""
    if message.text:
        return message.text[:50]
    if message.photo:
        return "[photo]"
    return "[media]"


class LoggingMiddleware(BaseMiddleware):
    """Логирует каждое событие (с пометкой, админ это или покупатель)."""

    async def __call__(
        self,
        handler: Callable[[Event, Dict[str, Any]], Awaitable[Any]],
        event: Event,
        data: Dict[str, Any],
    ) -> Any:
        user = event.from_user

        if isinstance(event, Message):
            logger.info(
                "message_received",
                chat_id=event.chat.id,
                user_id=user.id if user else None,
                username=user.username if user else None,
                is_admin=bool(user and config.is_admin(user.id)),
                content=describe_message(event),
            )
        elif isinstance(event, CallbackQuery):
            logger.info(
                "callback_received",
                user_id=user.id,
                is_admin=config.is_admin(user.id),
                callback_data=event.data,
            )

        return await handler(event, data)
