from fastapi import status
from sqlalchemy.exc import DBAPIError

SCHEMA_MISSING_MESSAGE = (
    "Таблицы базы данных не найдены. Примените миграции перед запуском сервиса."
)

_SCHEMA_MISSING_MARKERS = ("does not exist", "no such table", "undefined table")


class BroCodeError(Exception):
    """Базовая ошибка сервисного слоя с сообщением для пользователя."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(BroCodeError):
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(BroCodeError):
    status_code = status.HTTP_403_FORBIDDEN


class ValidationFailedError(BroCodeError):
    status_code = status.HTTP_400_BAD_REQUEST


class SchemaMissingError(BroCodeError):
    """Окружение не мигрировано: проблема настройки, а не данных."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = SCHEMA_MISSING_MESSAGE) -> None:
        super().__init__(message)


class BackendError(BroCodeError):
    status_code = status.HTTP_502_BAD_GATEWAY


def is_schema_missing(exc: BaseException) -> bool:
    text = str(getattr(exc, "orig", None) or exc).lower()
    return any(marker in text for marker in _SCHEMA_MISSING_MARKERS)


def translate_db_error(exc: DBAPIError, action: str) -> BroCodeError:
    """
    Превращает ошибку драйвера в типизированную ошибку сервиса.

    Отсутствующая таблица/колонка — SchemaMissingError,
    всё остальное — BackendError с человекочитаемым текстом.
    """
    if is_schema_missing(exc):
        return SchemaMissingError()
    return BackendError(f"Не удалось выполнить операцию ({action}): {exc.orig}")
