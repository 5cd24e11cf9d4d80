# app/bot/utils/text.py
"""
Тексты сообщений бота.

Бот работает с parse_mode=HTML, поэтому всё, что ввёл человек
(название, описание), экранируем через escape_html.
"""

import html

from app.models import Category, Product, StoreStats


def escape_html(text: str) -> str:
    return html.escape(text or "", quote=False)


def truncate(text: str, limit: int = 200) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def format_price(price: float) -> str:
    """2990.0 → "2990", 1499.5 → "1499.50" """
    if float(price).is_integer():
        return str(int(price))
    return f"{price:.2f}"


def product_created_text(product: Product) -> str:
    return (
        "✅ <b>Товар успешно добавлен!</b>\n\n"
        f"ID: <code>{product.id}</code>\n"
        f"Название: {escape_html(product.name)}\n"
        f"Цена: {format_price(product.price)} ₽\n"
        f"Категория: {product.category.label}\n"
        f"Фото: {len(product.photos)} шт."
    )


def product_updated_text(product: Product) -> str:
    return (
        "✅ <b>Товар успешно обновлен!</b>\n\n"
        f"ID: <code>{product.id}</code>\n"
        f"Название: {escape_html(product.name)}\n"
        f"Цена: {format_price(product.price)} ₽\n"
        f"Категория: {product.category.label}"
    )


def edit_menu_text(product: Product) -> str:
    return (
        "📝 <b>Редактирование товара</b>\n\n"
        "Текущие данные:\n"
        "━━━━━━━━━━━━━━\n"
        f"📌 Название: {escape_html(product.name)}\n"
        f"💰 Цена: {format_price(product.price)} ₽\n"
        f"📝 Описание: {escape_html(truncate(product.description))}\n"
        f"🏷️ Категория: {product.category.label}\n"
        f"📸 Фото: {len(product.photos)} шт.\n"
        "━━━━━━━━━━━━━━\n\n"
        "Что хотите изменить?"
    )


def product_card_caption(product: Product) -> str:
    return (
        f"📌 {escape_html(product.name)}\n"
        f"💰 Цена: {format_price(product.price)} ₽\n"
        f"🏷️ Категория: {product.category.label}\n"
        f"👁️ Просмотров: {product.views}\n"
        f"🆔 ID: <code>{product.id}</code>"
    )


def categories_text() -> str:
    lines = [f"{i}. {category.label} (<code>{category.value}</code>)" for i, category in enumerate(Category, start=1)]
    return (
        "🏷️ <b>Доступные категории:</b>\n\n"
        + "\n".join(lines)
        + f"\n\nВсего: {len(Category)} категорий"
    )


def stats_text(stats: StoreStats, storage_name: str) -> str:
    text = (
        "📊 <b>Статистика магазина</b>\n\n"
        f"📦 Товары: {stats.total_products}\n"
        f"👥 Пользователи: {stats.total_users}\n"
        f"👁️ Всего просмотров: {stats.total_views}\n"
    )

    if stats.categories:
        text += "\n📊 По категориям:\n"
        for category, count in stats.categories.items():
            text += f"   {Category(category).label}: {count} шт.\n"

    if stats.top_products:
        text += "\n🏆 Топ-5 популярных:\n"
        for i, top in enumerate(stats.top_products, start=1):
            text += f"   {i}. {escape_html(top.product.name)} - {top.views} 👁️\n"

    text += f"\n🗄️ Хранилище: {storage_name}"
    return text


ADMIN_MENU_TEXT = (
    "🔧 <b>Админ-панель</b>\n\n"
    "Доступные команды:\n"
    "━━━━━━━━━━━━━━\n"
    "📦 Управление товарами:\n"
    "/add_product - Добавить товар\n"
    "/edit_product [ID] - Редактировать товар\n"
    "/list_products - Список товаров\n"
    "/delete_product [ID] - Удалить товар\n"
    "/cancel - Прервать добавление / редактирование\n\n"
    "📊 Статистика:\n"
    "/stats - Статистика магазина\n"
    "/categories - Список категорий\n"
    "━━━━━━━━━━━━━━"
)
