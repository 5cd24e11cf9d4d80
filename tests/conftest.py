"""Shared fixtures: fake messenger / uploader, real JSON storage on tmp_path."""

from typing import List, Optional

import pytest
import pytest_asyncio

from app.bot.conversation.engine import AdminConversationEngine
from app.bot.conversation.events import CommandEvent, PhotoEvent, SelectionEvent, TextEvent
from app.bot.conversation.store import ConversationStore
from app.errors import UploadError
from app.models import Category, ProductFields
from infrastructure.storage.json_storage import JsonFileStorage

ADMIN_ID = 1001
CHAT_ID = 1001
STRANGER_ID = 2002


class FakeMessenger:
    """Remembers every outbound message."""

    def __init__(self):
        self.messages: List[dict] = []
        self.photos: List[dict] = []

    async def send_message(self, chat_id, text, keyboard=None):
        self.messages.append({"chat_id": chat_id, "text": text, "keyboard": keyboard})

    async def send_photo_with_caption(self, chat_id, photo_url, caption, keyboard=None):
        self.photos.append({"chat_id": chat_id, "photo_url": photo_url, "caption": caption, "keyboard": keyboard})

    @property
    def last_text(self) -> Optional[str]:
        return self.messages[-1]["text"] if self.messages else None

    def texts(self) -> List[str]:
        return [m["text"] for m in self.messages]


class FakeUploader:
    """file_id → https://cdn.test/<file_id>.jpg, or UploadError for ids in `failing`."""

    def __init__(self):
        self.uploaded: List[str] = []
        self.failing = set()

    async def upload_photo(self, media_ref: str) -> str:
        if media_ref in self.failing:
            raise UploadError(f"upload failed for {media_ref}")
        self.uploaded.append(media_ref)
        return f"https://cdn.test/{media_ref}.jpg"


class RecordingStorage(JsonFileStorage):
    """JSON storage that also records write calls made by the engine."""

    def __init__(self, data_dir):
        super().__init__(data_dir)
        self.created: List[ProductFields] = []
        self.updates: list = []

    async def create_product(self, fields):
        self.created.append(fields)
        return await super().create_product(fields)

    async def update_product(self, product_id, patch):
        self.updates.append((product_id, patch))
        return await super().update_product(product_id, patch)


class Chat:
    """Sends events into the engine on behalf of one sender."""

    def __init__(self, engine: AdminConversationEngine, chat_id: int = CHAT_ID, sender_id: int = ADMIN_ID):
        self.engine = engine
        self.chat_id = chat_id
        self.sender_id = sender_id

    async def command(self, name: str, args: str = ""):
        await self.engine.handle_command(CommandEvent(self.chat_id, self.sender_id, name, args))

    async def text(self, text: str):
        await self.engine.handle_text(TextEvent(self.chat_id, self.sender_id, text))

    async def photo(self, media_ref: str):
        await self.engine.handle_photo(PhotoEvent(self.chat_id, self.sender_id, media_ref))

    async def select(self, token: str):
        await self.engine.handle_selection(SelectionEvent(self.chat_id, self.sender_id, token))


@pytest_asyncio.fixture
async def storage(tmp_path):
    storage = RecordingStorage(tmp_path / "data")
    await storage.init()
    yield storage
    await storage.close()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def engine(storage, uploader, messenger, store):
    return AdminConversationEngine(
        storage=storage,
        uploader=uploader,
        messenger=messenger,
        store=store,
        is_authorized=lambda user_id: user_id == ADMIN_ID,
    )


@pytest.fixture
def chat(engine):
    return Chat(engine)


@pytest_asyncio.fixture
async def product(storage):
    """A product already in the catalogue."""
    created = await storage.create_product(ProductFields(
        name="Old Hoodie",
        price=1500,
        description="Grey cotton hoodie",
        category=Category.HOODIES,
        photos=["https://cdn.test/old1.jpg", "https://cdn.test/old2.jpg"],
    ))
    storage.created.clear()
    return created
