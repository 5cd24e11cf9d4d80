"""Tests for the product creation wizard."""

import asyncio

import pytest

from app.bot.conversation.engine import AdminConversationEngine
from app.bot.conversation.records import CreationStep, WizardMode
from app.models import Category
from tests.conftest import ADMIN_ID, CHAT_ID, Chat, FakeUploader

OTHER_CHAT_ID = 3003


async def fill_until_photos(chat):
    await chat.command("add_product")
    await chat.text("Blue Jacket")
    await chat.text("2990")
    await chat.text("Warm winter jacket")
    await chat.select("cat_Hoodies")


class TestHappyPath:

    @pytest.mark.asyncio
    async def test_full_creation_commits_exactly_one_product(self, chat, storage, store):
        await fill_until_photos(chat)
        await chat.photo("file-1")
        await chat.command("done")

        assert len(storage.created) == 1
        fields = storage.created[0]
        assert fields.name == "Blue Jacket"
        assert fields.price == 2990
        assert fields.description == "Warm winter jacket"
        assert fields.category is Category.HOODIES
        assert fields.photos == ["https://cdn.test/file-1.jpg"]

        assert store.get(CHAT_ID, WizardMode.CREATING) is None
        assert len(await storage.list_products()) == 1

    @pytest.mark.asyncio
    async def test_success_summary_mentions_product(self, chat, messenger, storage):
        await fill_until_photos(chat)
        await chat.photo("file-1")
        await chat.command("done")

        product = (await storage.list_products())[0]
        assert "Товар успешно добавлен" in messenger.last_text
        assert product.id in messenger.last_text

    @pytest.mark.asyncio
    async def test_photos_keep_order(self, chat, storage):
        await fill_until_photos(chat)
        for ref in ("a", "b", "c"):
            await chat.photo(ref)
        await chat.command("done")

        assert storage.created[0].photos == [
            "https://cdn.test/a.jpg",
            "https://cdn.test/b.jpg",
            "https://cdn.test/c.jpg",
        ]

    @pytest.mark.asyncio
    async def test_photo_ack_has_running_count(self, chat, messenger):
        await fill_until_photos(chat)
        await chat.photo("a")
        assert "(1)" in messenger.last_text
        await chat.photo("b")
        assert "(2)" in messenger.last_text

    @pytest.mark.asyncio
    async def test_description_step_shows_category_menu(self, chat, messenger):
        await chat.command("add_product")
        await chat.text("Blue Jacket")
        await chat.text("2990")
        await chat.text("Warm winter jacket")

        keyboard = messenger.messages[-1]["keyboard"]
        tokens = [row[0].callback_data for row in keyboard.inline_keyboard]
        assert tokens == [f"cat_{c.value}" for c in Category]


class TestValidation:

    @pytest.mark.asyncio
    async def test_bad_price_then_good_price(self, chat, store, messenger):
        await chat.command("add_product")
        await chat.text("Blue Jacket")

        await chat.text("abc")
        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_PRICE
        assert record.draft.price is None
        assert "Неправильная цена" in messenger.last_text

        await chat.text("2990")
        assert record.step is CreationStep.AWAITING_DESCRIPTION
        assert record.draft.price == 2990

    @pytest.mark.parametrize("bad_price", ["0", "-5", "", "inf", "12abc", "1e15"])
    @pytest.mark.asyncio
    async def test_non_positive_or_garbage_price_is_rejected(self, chat, store, bad_price):
        await chat.command("add_product")
        await chat.text("Blue Jacket")
        await chat.text(bad_price)

        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_PRICE
        assert record.draft.price is None

    @pytest.mark.asyncio
    async def test_blank_name_reprompts(self, chat, store):
        await chat.command("add_product")
        await chat.text("   ")

        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_NAME
        assert record.draft.name is None

    @pytest.mark.asyncio
    async def test_overlong_name_reprompts(self, chat, store):
        await chat.command("add_product")
        await chat.text("x" * 256)

        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_NAME
        assert record.draft.name is None

    @pytest.mark.asyncio
    async def test_free_text_does_not_pick_category(self, chat, store, messenger):
        await chat.command("add_product")
        await chat.text("Blue Jacket")
        await chat.text("2990")
        await chat.text("Warm winter jacket")
        await chat.text("Hoodies")

        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_CATEGORY
        assert record.draft.category is None
        assert "кнопкой" in messenger.last_text

    @pytest.mark.asyncio
    async def test_unknown_category_token_is_rejected(self, chat, store):
        await chat.command("add_product")
        await chat.text("Blue Jacket")
        await chat.text("2990")
        await chat.text("Warm winter jacket")
        await chat.select("cat_Spacesuits")

        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_CATEGORY
        assert record.draft.category is None

    @pytest.mark.asyncio
    async def test_photo_before_photo_step_is_ignored(self, chat, store, uploader):
        await chat.command("add_product")
        await chat.photo("early")

        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_NAME
        assert uploader.uploaded == []


class TestDone:

    @pytest.mark.asyncio
    async def test_done_without_photos_is_rejected(self, chat, storage, store, messenger):
        await fill_until_photos(chat)
        await chat.command("done")

        assert storage.created == []
        assert store.get(CHAT_ID, WizardMode.CREATING).step is CreationStep.AWAITING_PHOTOS
        assert "хотя бы одно фото" in messenger.last_text

    @pytest.mark.asyncio
    async def test_done_before_photo_step_is_a_hint(self, chat, storage, store):
        await chat.command("add_product")
        await chat.text("Blue Jacket")
        await chat.command("done")

        assert storage.created == []
        assert store.get(CHAT_ID, WizardMode.CREATING).step is CreationStep.AWAITING_PRICE

    @pytest.mark.asyncio
    async def test_done_without_wizard(self, chat, storage, messenger):
        await chat.command("done")
        assert storage.created == []
        assert "/add_product" in messenger.last_text

    @pytest.mark.asyncio
    async def test_failed_upload_keeps_step(self, chat, store, uploader, messenger):
        await fill_until_photos(chat)
        uploader.failing.add("broken")

        await chat.photo("broken")
        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_PHOTOS
        assert record.pending_photo_urls == []
        assert "Ошибка загрузки" in messenger.last_text

        await chat.photo("fine")
        assert record.pending_photo_urls == ["https://cdn.test/fine.jpg"]

    @pytest.mark.asyncio
    async def test_persistence_failure_ends_wizard(self, chat, storage, store, messenger, monkeypatch):
        from app.errors import PersistenceError

        async def broken_create(fields):
            raise PersistenceError("disk full")

        await fill_until_photos(chat)
        await chat.photo("file-1")
        monkeypatch.setattr(storage, "create_product", broken_create)
        await chat.command("done")

        assert store.get(CHAT_ID, WizardMode.CREATING) is None
        assert "ошибка" in messenger.last_text.lower()


class TestRestartAndCancel:

    @pytest.mark.asyncio
    async def test_add_product_restarts(self, chat, store):
        await chat.command("add_product")
        await chat.text("Blue Jacket")
        await chat.command("add_product")

        record = store.get(CHAT_ID, WizardMode.CREATING)
        assert record.step is CreationStep.AWAITING_NAME
        assert record.draft.name is None

    @pytest.mark.asyncio
    async def test_cancel_drops_record(self, chat, store, storage):
        await fill_until_photos(chat)
        await chat.photo("file-1")
        await chat.command("cancel")

        assert store.get(CHAT_ID, WizardMode.CREATING) is None
        assert storage.created == []

    @pytest.mark.asyncio
    async def test_chats_do_not_share_records(self, engine, store):
        from tests.conftest import Chat

        first = Chat(engine, chat_id=1)
        second = Chat(engine, chat_id=2)

        await first.command("add_product")
        await first.text("First")
        await second.command("add_product")

        assert store.get(1, WizardMode.CREATING).step is CreationStep.AWAITING_PRICE
        assert store.get(2, WizardMode.CREATING).step is CreationStep.AWAITING_NAME


class GatedUploader(FakeUploader):
    """Holds every upload until `release` is set."""

    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def upload_photo(self, media_ref: str) -> str:
        self.started.set()
        await self.release.wait()
        return await super().upload_photo(media_ref)


class TestConcurrentChats:

    @pytest.mark.asyncio
    async def test_slow_upload_does_not_block_other_chat(self, storage, messenger, store):
        uploader = GatedUploader()
        engine = AdminConversationEngine(
            storage=storage,
            uploader=uploader,
            messenger=messenger,
            store=store,
            is_authorized=lambda user_id: user_id == ADMIN_ID,
        )
        chat_a = Chat(engine, chat_id=CHAT_ID)
        chat_b = Chat(engine, chat_id=OTHER_CHAT_ID)

        await fill_until_photos(chat_a)
        upload = asyncio.create_task(chat_a.photo("slow"))
        await asyncio.wait_for(uploader.started.wait(), 1)

        await asyncio.wait_for(chat_b.command("add_product"), 1)

        record_b = store.get(OTHER_CHAT_ID, WizardMode.CREATING)
        assert record_b.step is CreationStep.AWAITING_NAME
        assert not upload.done()

        uploader.release.set()
        await asyncio.wait_for(upload, 1)

        record_a = store.get(CHAT_ID, WizardMode.CREATING)
        assert record_a.pending_photo_urls == ["https://cdn.test/slow.jpg"]
