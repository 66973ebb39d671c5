class ShortenerError(Exception):
    """Базовое исключение сервиса."""


class ValidationError(ShortenerError):
    """Пустой или некорректный URL."""


class StorageError(ShortenerError):
    """Ошибка чтения или записи базы данных."""


class ExhaustedError(ShortenerError):
    """Не удалось подобрать свободный код за отведённое число попыток."""
