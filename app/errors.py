# app/errors.py
"""
Ошибки магазина.

Все ошибки наследуются от ShopError, чтобы обработчики могли
ловить их одним except и показывать админу понятное сообщение.
"""


class ShopError(Exception):
    """Базовая ошибка приложения."""


class ValidationError(ShopError):
    """
    Неправильный ввод (цена не число, пустое название, нет фото...).

    Мастер остаётся на том же шаге и переспрашивает.
    """


class UploadError(ShopError):
    """Не удалось загрузить фото на хостинг."""


class PersistenceError(ShopError):
    """Хранилище (JSON файлы или БД) не смогло выполнить операцию."""


class AuthorizationError(ShopError):
    """Команду отправил не админ."""


class NotFoundError(ShopError):
    """Товар не найден."""

    def __init__(self, product_id: str):
        super().__init__(f"Товар с ID {product_id} не найден")
        self.product_id = product_id
