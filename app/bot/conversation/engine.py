# app/bot/conversation/engine.py
"""
🤖 ДВИЖОК АДМИН-ДИАЛОГОВ

Здесь живёт вся логика админки:
- мастер добавления товара (название → цена → описание → категория → фото → /done)
- мастер редактирования (меню полей ⇄ ввод значения, потом "Сохранить")
- список / удаление товаров, статистика, категории

Движок получает простые события (TextEvent, PhotoEvent, SelectionEvent,
CommandEvent) и отвечает через Messenger. Хранилище, загрузчик фото и
проверка доступа передаются снаружи, поэтому движок тестируется без Telegram.

Правила ошибок:
- неправильный ввод → переспрашиваем, шаг не меняется
- фото не загрузилось → сообщаем, шаг не меняется (можно прислать ещё раз)
- хранилище упало при сохранении → сообщаем, мастер закрывается
"""

from typing import Callable, Optional

import structlog
from aiogram.types import InlineKeyboardMarkup

from app.bot.conversation.events import CommandEvent, PhotoEvent, SelectionEvent, TextEvent
from app.bot.conversation.records import (
    CreationRecord,
    CreationStep,
    EditField,
    EditRecord,
    EditStep,
    WizardMode,
)
from app.bot.conversation.store import ConversationStore
from app.bot.conversation.validators import (
    CREATE_CATEGORY_PREFIX,
    EDIT_CATEGORY_PREFIX,
    parse_category_token,
    parse_name,
    parse_price,
    require_text,
)
from app.bot.keyboards.admin import (
    CANCEL_DELETE,
    CONFIRM_DELETE_PREFIX,
    EDIT_CANCEL,
    EDIT_FIELD_PREFIX,
    EDIT_SAVE,
    PRODUCT_DELETE_PREFIX,
    PRODUCT_EDIT_PREFIX,
    category_keyboard,
    delete_confirmation_keyboard,
    edit_category_keyboard,
    edit_menu_keyboard,
    product_card_keyboard,
)
from app.bot.messenger import Messenger
from app.bot.utils.text import (
    ADMIN_MENU_TEXT,
    categories_text,
    edit_menu_text,
    escape_html,
    format_price,
    product_card_caption,
    product_created_text,
    product_updated_text,
    stats_text,
)
from app.errors import AuthorizationError, NotFoundError, PersistenceError, UploadError, ValidationError
from app.models import ProductFields
from infrastructure.media import MediaUploader
from infrastructure.storage.base import Storage

logger = structlog.get_logger()

ACCESS_DENIED_TEXT = "❌ У вас нет доступа к админ-панели"

PRICE_PROMPT = "💰 Введите цену товара (только число):"
PRICE_RETRY = "❌ Неправильная цена. Введите число больше нуля (например: 2990):"


class AdminConversationEngine:
    """Машина состояний админки."""

    def __init__(
        self,
        storage: Storage,
        uploader: MediaUploader,
        messenger: Messenger,
        store: ConversationStore,
        is_authorized: Callable[[int], bool],
    ):
        self.storage = storage
        self.uploader = uploader
        self.messenger = messenger
        self.store = store
        self.is_authorized = is_authorized

    # ==========================================
    # ВХОДНЫЕ ТОЧКИ
    # ==========================================

    async def handle_command(self, event: CommandEvent) -> None:
        if not await self._check_access(event.chat_id, event.sender_id):
            return

        async with self.store.chat_lock(event.chat_id):
            await self._dispatch_command(event)

    async def handle_text(self, event: TextEvent) -> None:
        if not await self._check_access(event.chat_id, event.sender_id):
            return

        async with self.store.chat_lock(event.chat_id):
            edit = self.store.get(event.chat_id, WizardMode.EDITING)
            if edit and edit.step is EditStep.AWAITING_FIELD_VALUE:
                await self._edit_text(event.chat_id, edit, event.text)
                return

            creation = self.store.get(event.chat_id, WizardMode.CREATING)
            if creation:
                await self._creation_text(event.chat_id, creation, event.text)
                return

            await self._reply(event.chat_id, "🤔 Сейчас ничего не заполняется.\n\nОткройте /admin чтобы выбрать действие")

    async def handle_photo(self, event: PhotoEvent) -> None:
        if not await self._check_access(event.chat_id, event.sender_id):
            return

        async with self.store.chat_lock(event.chat_id):
            edit = self.store.get(event.chat_id, WizardMode.EDITING)
            if edit and edit.awaiting(EditField.PHOTOS):
                await self._collect_photo(event, edit.pending_photo_urls, "/done_photos")
                return

            creation = self.store.get(event.chat_id, WizardMode.CREATING)
            if creation and creation.step is CreationStep.AWAITING_PHOTOS:
                await self._collect_photo(event, creation.pending_photo_urls, "/done")
                return

            logger.debug("photo_ignored", chat_id=event.chat_id)

    async def handle_selection(self, event: SelectionEvent) -> None:
        if not await self._check_access(event.chat_id, event.sender_id):
            return

        async with self.store.chat_lock(event.chat_id):
            await self._dispatch_selection(event.chat_id, event.token)

    # ==========================================
    # ДОСТУП
    # ==========================================

    def _authorize(self, sender_id: int) -> None:
        if not self.is_authorized(sender_id):
            raise AuthorizationError(f"Пользователь {sender_id} не админ")

    async def _check_access(self, chat_id: int, sender_id: int) -> bool:
        """Отказ = одно фиксированное сообщение, записи и хранилище не трогаем."""
        try:
            self._authorize(sender_id)
        except AuthorizationError as e:
            logger.warning("access_denied", chat_id=chat_id, sender_id=sender_id, error=str(e))
            await self._reply(chat_id, ACCESS_DENIED_TEXT)
            return False
        return True

    # ==========================================
    # КОМАНДЫ
    # ==========================================

    async def _dispatch_command(self, event: CommandEvent) -> None:
        chat_id = event.chat_id
        args = event.args.strip()

        logger.info("admin_command", chat_id=chat_id, command=event.name, args=args)

        if event.name == "admin":
            await self._reply(chat_id, ADMIN_MENU_TEXT)
        elif event.name == "add_product":
            await self.start_creation(chat_id)
        elif event.name == "done":
            await self.finish_creation(chat_id)
        elif event.name == "edit_product":
            if not args:
                await self._reply(chat_id, "Укажите ID товара: /edit_product [ID]")
                return
            await self.start_edit(chat_id, args)
        elif event.name == "done_photos":
            await self.finish_edit_photos(chat_id)
        elif event.name == "cancel":
            await self.cancel_all(chat_id)
        elif event.name == "list_products":
            await self.list_products(chat_id)
        elif event.name == "delete_product":
            if not args:
                await self._reply(chat_id, "Укажите ID товара: /delete_product [ID]")
                return
            await self.ask_delete(chat_id, args)
        elif event.name == "stats":
            await self.show_stats(chat_id)
        elif event.name == "categories":
            await self._reply(chat_id, categories_text())
        else:
            await self._reply(chat_id, "🤔 Неизвестная команда. Список команд: /admin")

    async def cancel_all(self, chat_id: int) -> None:
        had_any = any(self.store.get(chat_id, mode) for mode in WizardMode)
        for mode in WizardMode:
            self.store.remove(chat_id, mode)

        await self._reply(chat_id, "❌ Действие отменено" if had_any else "Нечего отменять")

    # ==========================================
    # КНОПКИ
    # ==========================================

    async def _dispatch_selection(self, chat_id: int, token: str) -> None:
        logger.info("admin_selection", chat_id=chat_id, token=token)

        if token.startswith(CREATE_CATEGORY_PREFIX):
            await self._creation_category(chat_id, token)
        elif token.startswith(EDIT_CATEGORY_PREFIX):
            await self._edit_category(chat_id, token)
        elif token == EDIT_SAVE:
            await self.save_edit(chat_id)
        elif token == EDIT_CANCEL:
            await self.cancel_edit(chat_id)
        elif token.startswith(EDIT_FIELD_PREFIX):
            await self._select_edit_field(chat_id, token[len(EDIT_FIELD_PREFIX):])
        elif token.startswith(PRODUCT_EDIT_PREFIX):
            await self.start_edit(chat_id, token[len(PRODUCT_EDIT_PREFIX):])
        elif token.startswith(PRODUCT_DELETE_PREFIX):
            await self.ask_delete(chat_id, token[len(PRODUCT_DELETE_PREFIX):])
        elif token.startswith(CONFIRM_DELETE_PREFIX):
            await self.delete_product(chat_id, token[len(CONFIRM_DELETE_PREFIX):])
        elif token == CANCEL_DELETE:
            await self._reply(chat_id, "❌ Удаление отменено")
        else:
            logger.warning("unknown_selection", chat_id=chat_id, token=token)

    # ==========================================
    # МАСТЕР ДОБАВЛЕНИЯ
    # ==========================================

    async def start_creation(self, chat_id: int) -> None:
        self.store.put(chat_id, WizardMode.CREATING, CreationRecord())
        logger.info("creation_started", chat_id=chat_id)
        await self._reply(chat_id, "📝 Введите название товара:")

    async def _creation_text(self, chat_id: int, record: CreationRecord, text: str) -> None:
        draft = record.draft

        if record.step is CreationStep.AWAITING_NAME:
            try:
                draft.name = parse_name(text)
            except ValidationError as e:
                await self._reply(chat_id, f"❌ {e}. Введите название товара:")
                return
            record.step = CreationStep.AWAITING_PRICE
            await self._reply(chat_id, PRICE_PROMPT)

        elif record.step is CreationStep.AWAITING_PRICE:
            try:
                draft.price = parse_price(text)
            except ValidationError:
                await self._reply(chat_id, PRICE_RETRY)
                return
            record.step = CreationStep.AWAITING_DESCRIPTION
            await self._reply(chat_id, "📄 Введите описание товара:")

        elif record.step is CreationStep.AWAITING_DESCRIPTION:
            try:
                draft.description = require_text(text, "Описание")
            except ValidationError as e:
                await self._reply(chat_id, f"❌ {e}. Введите описание товара:")
                return
            record.step = CreationStep.AWAITING_CATEGORY
            await self._reply(chat_id, "🏷️ Выберите категорию:", category_keyboard())

        elif record.step is CreationStep.AWAITING_CATEGORY:
            await self._reply(chat_id, "🏷️ Выберите категорию кнопкой выше 👆")

        elif record.step is CreationStep.AWAITING_PHOTOS:
            await self._reply(chat_id, "📸 Жду фото товара. Когда закончите, отправьте /done")

        logger.info("creation_step", chat_id=chat_id, step=record.step.value)

    async def _creation_category(self, chat_id: int, token: str) -> None:
        record = self.store.get(chat_id, WizardMode.CREATING)
        if not record or record.step is not CreationStep.AWAITING_CATEGORY:
            logger.info("creation_category_ignored", chat_id=chat_id, token=token)
            return

        try:
            category = parse_category_token(token, CREATE_CATEGORY_PREFIX)
        except ValidationError as e:
            await self._reply(chat_id, f"❌ {e}", category_keyboard())
            return

        record.draft.category = category
        record.pending_photo_urls = []
        record.step = CreationStep.AWAITING_PHOTOS

        await self._reply(
            chat_id,
            f"Выбрана категория: {category.label}\n\n"
            "📸 Отправьте фото товара (можно несколько).\n\n"
            "Когда закончите, отправьте команду /done"
        )

    async def finish_creation(self, chat_id: int) -> None:
        """/done: сохраняем товар, если есть хотя бы одно фото."""
        record = self.store.get(chat_id, WizardMode.CREATING)
        if not record:
            await self._reply(chat_id, "Нет товара в процессе добавления. Начните с /add_product")
            return

        if record.step is not CreationStep.AWAITING_PHOTOS:
            await self._reply(chat_id, "❌ Сначала заполните все поля товара")
            return

        if not record.pending_photo_urls:
            await self._reply(chat_id, "❌ Добавьте хотя бы одно фото")
            return

        draft = record.draft
        fields = ProductFields(
            name=draft.name,
            price=draft.price,
            description=draft.description,
            category=draft.category,
            photos=list(record.pending_photo_urls),
        )

        try:
            product = await self.storage.create_product(fields)
        except PersistenceError as e:
            logger.error("product_create_failed", chat_id=chat_id, error=str(e))
            await self._reply(chat_id, "❌ Произошла ошибка при создании товара. Начните заново с /add_product")
        else:
            logger.info("product_added_by_admin", chat_id=chat_id, product_id=product.id)
            await self._reply(chat_id, product_created_text(product))
        finally:
            self.store.remove(chat_id, WizardMode.CREATING)

    # ==========================================
    # ФОТО (общая часть для обоих мастеров)
    # ==========================================

    async def _collect_photo(self, event: PhotoEvent, urls: list, finish_command: str) -> None:
        await self._reply(event.chat_id, "⏳ Загружаем фото...")

        try:
            url = await self.uploader.upload_photo(event.media_ref)
        except UploadError as e:
            logger.error("photo_collect_failed", chat_id=event.chat_id, error=str(e))
            await self._reply(event.chat_id, "❌ Ошибка загрузки фото. Попробуйте отправить его ещё раз")
            return

        urls.append(url)
        await self._reply(
            event.chat_id,
            f"✅ Фото добавлено ({len(urls)})\n\n"
            f"Можете добавить ещё или отправить {finish_command}"
        )

    # ==========================================
    # МАСТЕР РЕДАКТИРОВАНИЯ
    # ==========================================

    async def start_edit(self, chat_id: int, product_id: str) -> None:
        try:
            product = await self.storage.get_product_by_id(product_id)
            if not product:
                raise NotFoundError(product_id)
        except NotFoundError as e:
            await self._reply(chat_id, f"❌ {escape_html(str(e))}")
            return
        except PersistenceError as e:
            logger.error("product_load_failed", chat_id=chat_id, product_id=product_id, error=str(e))
            await self._reply(chat_id, "❌ Ошибка при загрузке товара")
            return

        record = EditRecord(target_product_id=product.id, draft=product.model_copy(deep=True))
        self.store.put(chat_id, WizardMode.EDITING, record)

        logger.info("edit_started", chat_id=chat_id, product_id=product.id)
        await self._show_edit_menu(chat_id, record)

    async def _show_edit_menu(self, chat_id: int, record: EditRecord) -> None:
        await self._reply(chat_id, edit_menu_text(record.draft), edit_menu_keyboard())

    async def _select_edit_field(self, chat_id: int, raw_field: str) -> None:
        record = self.store.get(chat_id, WizardMode.EDITING)
        if not record:
            await self._reply(chat_id, "Редактирование не начато. Используйте /edit_product [ID]")
            return

        try:
            edit_field = EditField(raw_field)
        except ValueError:
            logger.warning("unknown_edit_field", chat_id=chat_id, field=raw_field)
            return

        if record.step is not EditStep.IDLE:
            await self._reply(chat_id, "⏳ Сначала закончите изменение текущего поля")
            return

        record.await_value(edit_field)

        if edit_field is EditField.NAME:
            await self._reply(chat_id, "📌 Введите новое название товара:")
        elif edit_field is EditField.PRICE:
            await self._reply(chat_id, "💰 Введите новую цену (только число):")
        elif edit_field is EditField.DESCRIPTION:
            await self._reply(chat_id, "📝 Введите новое описание:")
        elif edit_field is EditField.CATEGORY:
            await self._reply(chat_id, "🏷️ Выберите новую категорию:", edit_category_keyboard())
        elif edit_field is EditField.PHOTOS:
            await self._reply(
                chat_id,
                "📸 Отправьте новые фото товара (заменят старые).\n\n"
                "Когда закончите, отправьте /done_photos"
            )

    async def _edit_text(self, chat_id: int, record: EditRecord, text: str) -> None:
        edit_field = record.editing_field
        draft = record.draft

        if edit_field is EditField.NAME:
            try:
                draft.name = parse_name(text)
            except ValidationError as e:
                await self._reply(chat_id, f"❌ {e}. Введите новое название:")
                return
            notice = f"✅ Название изменено на: {escape_html(draft.name)}"

        elif edit_field is EditField.PRICE:
            try:
                draft.price = parse_price(text)
            except ValidationError:
                await self._reply(chat_id, PRICE_RETRY)
                return
            notice = f"✅ Цена изменена на: {format_price(draft.price)} ₽"

        elif edit_field is EditField.DESCRIPTION:
            try:
                draft.description = require_text(text, "Описание")
            except ValidationError as e:
                await self._reply(chat_id, f"❌ {e}. Введите новое описание:")
                return
            notice = "✅ Описание изменено"

        elif edit_field is EditField.CATEGORY:
            await self._reply(chat_id, "🏷️ Выберите категорию кнопкой выше 👆")
            return

        else:
            await self._reply(chat_id, "📸 Жду новые фото. Когда закончите, отправьте /done_photos")
            return

        record.back_to_idle()
        logger.info("edit_field_updated", chat_id=chat_id, product_id=record.target_product_id, field=edit_field.value)
        await self._reply(chat_id, notice)
        await self._show_edit_menu(chat_id, record)

    async def _edit_category(self, chat_id: int, token: str) -> None:
        record = self.store.get(chat_id, WizardMode.EDITING)
        if not record or not record.awaiting(EditField.CATEGORY):
            logger.info("edit_category_ignored", chat_id=chat_id, token=token)
            return

        try:
            category = parse_category_token(token, EDIT_CATEGORY_PREFIX)
        except ValidationError as e:
            await self._reply(chat_id, f"❌ {e}", edit_category_keyboard())
            return

        record.draft.category = category
        record.back_to_idle()

        logger.info("edit_field_updated", chat_id=chat_id, product_id=record.target_product_id, field="category")
        await self._reply(chat_id, f"✅ Категория изменена на: {category.label}")
        await self._show_edit_menu(chat_id, record)

    async def finish_edit_photos(self, chat_id: int) -> None:
        """/done_photos: новые фото полностью заменяют старые."""
        record = self.store.get(chat_id, WizardMode.EDITING)
        if not record or not record.awaiting(EditField.PHOTOS):
            await self._reply(chat_id, "Сейчас фото не редактируются")
            return

        if not record.pending_photo_urls:
            await self._reply(chat_id, "❌ Добавьте хотя бы одно фото")
            return

        record.draft.photos = list(record.pending_photo_urls)
        record.back_to_idle()

        logger.info("edit_field_updated", chat_id=chat_id, product_id=record.target_product_id, field="photos")
        await self._reply(chat_id, f"✅ Фото обновлены ({len(record.draft.photos)} шт.)")
        await self._show_edit_menu(chat_id, record)

    async def save_edit(self, chat_id: int) -> None:
        record = self.store.get(chat_id, WizardMode.EDITING)
        if not record:
            await self._reply(chat_id, "Редактирование не начато. Используйте /edit_product [ID]")
            return

        if record.step is not EditStep.IDLE:
            await self._reply(chat_id, "⏳ Сначала закончите изменение текущего поля")
            return

        try:
            product = await self.storage.update_product(
                record.target_product_id,
                record.draft.editable_fields(),
            )
        except PersistenceError as e:
            logger.error("product_update_failed", chat_id=chat_id, product_id=record.target_product_id, error=str(e))
            await self._reply(chat_id, "❌ Ошибка при сохранении изменений")
        else:
            if product:
                logger.info("product_edited_by_admin", chat_id=chat_id, product_id=product.id)
                await self._reply(chat_id, product_updated_text(product))
            else:
                await self._reply(chat_id, f"❌ Товар с ID {escape_html(record.target_product_id)} больше не существует")
        finally:
            self.store.remove(chat_id, WizardMode.EDITING)

    async def cancel_edit(self, chat_id: int) -> None:
        if not self.store.get(chat_id, WizardMode.EDITING):
            return

        self.store.remove(chat_id, WizardMode.EDITING)
        logger.info("edit_cancelled", chat_id=chat_id)
        await self._reply(chat_id, "❌ Редактирование отменено")

    # ==========================================
    # СПИСОК / УДАЛЕНИЕ / СТАТИСТИКА
    # ==========================================

    async def list_products(self, chat_id: int) -> None:
        try:
            products = await self.storage.list_products()
        except PersistenceError as e:
            logger.error("list_products_failed", chat_id=chat_id, error=str(e))
            await self._reply(chat_id, "❌ Ошибка получения списка товаров")
            return

        if not products:
            await self._reply(chat_id, "📦 Товаров пока нет")
            return

        await self._reply(chat_id, f"📦 Всего товаров: {len(products)}\n\n⬇️ Карточки товаров:")

        for product in products:
            try:
                await self.messenger.send_photo_with_caption(
                    chat_id,
                    product.photos[0],
                    product_card_caption(product),
                    product_card_keyboard(product.id),
                )
            except Exception as e:
                logger.error("product_card_send_failed", chat_id=chat_id, product_id=product.id, error=str(e))

    async def ask_delete(self, chat_id: int, product_id: str) -> None:
        try:
            product = await self.storage.get_product_by_id(product_id)
        except PersistenceError as e:
            logger.error("product_load_failed", chat_id=chat_id, product_id=product_id, error=str(e))
            await self._reply(chat_id, "❌ Ошибка при загрузке товара")
            return

        if not product:
            await self._reply(chat_id, f"❌ {escape_html(str(NotFoundError(product_id)))}")
            return

        await self._reply(
            chat_id,
            "⚠️ <b>Подтвердите удаление:</b>\n\n"
            f"Название: {escape_html(product.name)}\n"
            f"Цена: {format_price(product.price)} ₽",
            delete_confirmation_keyboard(product.id),
        )

    async def delete_product(self, chat_id: int, product_id: str) -> None:
        try:
            deleted = await self.storage.delete_product(product_id)
        except PersistenceError as e:
            logger.error("product_delete_failed", chat_id=chat_id, product_id=product_id, error=str(e))
            await self._reply(chat_id, "❌ Ошибка удаления")
            return

        if deleted:
            logger.info("product_deleted_by_admin", chat_id=chat_id, product_id=product_id)
            await self._reply(chat_id, "✅ Товар успешно удален")
        else:
            await self._reply(chat_id, f"❌ {escape_html(str(NotFoundError(product_id)))}")

    async def show_stats(self, chat_id: int) -> None:
        try:
            stats = await self.storage.get_stats()
        except PersistenceError as e:
            logger.error("stats_failed", chat_id=chat_id, error=str(e))
            await self._reply(chat_id, "❌ Ошибка получения статистики")
            return

        await self._reply(chat_id, stats_text(stats, self.storage.name))

    # ==========================================
    # ОТПРАВКА
    # ==========================================

    async def _reply(self, chat_id: int, text: str, keyboard: Optional[InlineKeyboardMarkup] = None) -> None:
        await self.messenger.send_message(chat_id, text, keyboard)
