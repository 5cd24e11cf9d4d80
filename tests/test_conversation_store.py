"""Tests for the in-memory conversation store."""

import asyncio

import pytest

from app.bot.conversation.records import CreationRecord, EditRecord, WizardMode
from app.bot.conversation.store import ConversationStore
from app.models import Category, Product


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_edit_record():
    product = Product(
        id="p1",
        name="Cap",
        price=500,
        description="",
        category=Category.HEADWEAR,
        photos=["https://cdn.test/cap.jpg"],
    )
    return EditRecord(target_product_id=product.id, draft=product)


class TestStore:

    def test_get_missing(self):
        assert ConversationStore().get(1, WizardMode.CREATING) is None

    def test_modes_are_independent(self):
        store = ConversationStore()
        creation = CreationRecord()
        edit = make_edit_record()

        store.put(1, WizardMode.CREATING, creation)
        store.put(1, WizardMode.EDITING, edit)

        assert store.get(1, WizardMode.CREATING) is creation
        assert store.get(1, WizardMode.EDITING) is edit
        assert len(store) == 2

        store.remove(1, WizardMode.CREATING)
        assert store.get(1, WizardMode.CREATING) is None
        assert store.get(1, WizardMode.EDITING) is edit

    def test_put_replaces(self):
        store = ConversationStore()
        store.put(1, WizardMode.CREATING, CreationRecord())
        fresh = CreationRecord()
        store.put(1, WizardMode.CREATING, fresh)

        assert store.get(1, WizardMode.CREATING) is fresh
        assert len(store) == 1

    def test_remove_missing_is_noop(self):
        store = ConversationStore()
        store.remove(42, WizardMode.EDITING)
        assert len(store) == 0


class TestExpiry:

    def test_no_ttl_never_expires(self):
        clock = FakeClock()
        store = ConversationStore(clock=clock)
        store.put(1, WizardMode.CREATING, CreationRecord())

        clock.now = 10 ** 9
        assert store.get(1, WizardMode.CREATING) is not None

    def test_idle_record_expires(self):
        clock = FakeClock()
        store = ConversationStore(ttl_seconds=60, clock=clock)
        store.put(1, WizardMode.CREATING, CreationRecord())

        clock.now = 61
        assert store.get(1, WizardMode.CREATING) is None
        assert len(store) == 0

    def test_access_refreshes_ttl(self):
        clock = FakeClock()
        store = ConversationStore(ttl_seconds=60, clock=clock)
        store.put(1, WizardMode.CREATING, CreationRecord())

        clock.now = 50
        assert store.get(1, WizardMode.CREATING) is not None
        clock.now = 100
        assert store.get(1, WizardMode.CREATING) is not None


class TestChatLock:

    def test_same_lock_per_chat(self):
        store = ConversationStore()
        assert store.chat_lock(1) is store.chat_lock(1)
        assert store.chat_lock(1) is not store.chat_lock(2)

    @pytest.mark.asyncio
    async def test_events_of_one_chat_run_in_order(self):
        store = ConversationStore()
        order = []

        async def worker(name, delay):
            async with store.chat_lock(1):
                order.append(f"{name}-start")
                await asyncio.sleep(delay)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a", 0.02), worker("b", 0))

        assert order == ["a-start", "a-end", "b-start", "b-end"]
