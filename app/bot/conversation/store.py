# app/bot/conversation/store.py
"""
🧠 ХРАНИЛИЩЕ ДИАЛОГОВ

Держит записи мастеров в памяти процесса:
    (chat_id, mode) → CreationRecord / EditRecord

После перезапуска бота всё теряется - так и задумано,
незаконченный мастер админ просто начинает заново.

Если conversation_ttl_minutes > 0, записи, которых не трогали
дольше этого времени, удаляются при следующем обращении.
"""

import asyncio
import time
from typing import Callable, Dict, Optional, Tuple

import structlog

from app.bot.conversation.records import ConversationRecord, WizardMode

logger = structlog.get_logger()

Key = Tuple[int, WizardMode]


class ConversationStore:
    """In-memory хранилище записей мастеров."""

    def __init__(self, ttl_seconds: float = 0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._records: Dict[Key, ConversationRecord] = {}
        self._touched: Dict[Key, float] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    def get(self, chat_id: int, mode: WizardMode) -> Optional[ConversationRecord]:
        key = (chat_id, mode)
        record = self._records.get(key)
        if record is None:
            return None

        if self.ttl_seconds and self._clock() - self._touched[key] > self.ttl_seconds:
            logger.info("conversation_expired", chat_id=chat_id, mode=mode.value)
            self.remove(chat_id, mode)
            return None

        self._touched[key] = self._clock()
        return record

    def put(self, chat_id: int, mode: WizardMode, record: ConversationRecord) -> None:
        key = (chat_id, mode)
        self._records[key] = record
        self._touched[key] = self._clock()

    def remove(self, chat_id: int, mode: WizardMode) -> None:
        key = (chat_id, mode)
        self._records.pop(key, None)
        self._touched.pop(key, None)

    def chat_lock(self, chat_id: int) -> asyncio.Lock:
        """
        Лок на чат: события одного чата обрабатываются строго по очереди,
        разные чаты друг друга не ждут.
        """
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = self._locks[chat_id] = asyncio.Lock()
        return lock

    def __len__(self) -> int:
        return len(self._records)
