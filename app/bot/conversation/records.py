# app/bot/conversation/records.py
"""
📝 ЗАПИСИ ДИАЛОГОВ (рабочая память мастеров)

Два вида записей:
- CreationRecord - мастер добавления товара
- EditRecord     - мастер редактирования товара

В одном чате одновременно может быть по одной записи каждого вида.
В EditRecord есть target_product_id, в CreationRecord его нет вообще,
поэтому "редактирование без товара" невозможно даже случайно.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from app.models import Category, Product


class WizardMode(str, Enum):
    CREATING = "creating"
    EDITING = "editing"


class CreationStep(str, Enum):
    AWAITING_NAME = "awaiting_name"
    AWAITING_PRICE = "awaiting_price"
    AWAITING_DESCRIPTION = "awaiting_description"
    AWAITING_CATEGORY = "awaiting_category"
    AWAITING_PHOTOS = "awaiting_photos"


class EditStep(str, Enum):
    IDLE = "idle"
    AWAITING_FIELD_VALUE = "awaiting_field_value"


class EditField(str, Enum):
    NAME = "name"
    PRICE = "price"
    DESCRIPTION = "description"
    CATEGORY = "category"
    PHOTOS = "photos"


@dataclass
class ProductDraft:
    """Товар, который админ заполняет по шагам."""

    name: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    category: Optional[Category] = None


@dataclass
class CreationRecord:
    step: CreationStep = CreationStep.AWAITING_NAME
    draft: ProductDraft = field(default_factory=ProductDraft)
    pending_photo_urls: List[str] = field(default_factory=list)

    mode = WizardMode.CREATING


@dataclass
class EditRecord:
    target_product_id: str
    draft: Product
    # копия товара, меняем её, а в хранилище пишем только на "Сохранить"
    step: EditStep = EditStep.IDLE
    editing_field: Optional[EditField] = None
    pending_photo_urls: List[str] = field(default_factory=list)

    mode = WizardMode.EDITING

    def await_value(self, edit_field: EditField) -> None:
        self.step = EditStep.AWAITING_FIELD_VALUE
        self.editing_field = edit_field
        self.pending_photo_urls = []

    def back_to_idle(self) -> None:
        self.step = EditStep.IDLE
        self.editing_field = None
        self.pending_photo_urls = []

    def awaiting(self, edit_field: EditField) -> bool:
        return self.step is EditStep.AWAITING_FIELD_VALUE and self.editing_field is edit_field


ConversationRecord = Union[CreationRecord, EditRecord]
