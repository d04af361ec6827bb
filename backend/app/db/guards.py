import functools
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import is_schema_missing, translate_db_error
from app.loader import APP_LOGGER

T = TypeVar("T")


@asynccontextmanager
async def write_guard(session: AsyncSession, action: str) -> AsyncIterator[None]:
    """Откатывает транзакцию и поднимает типизированную ошибку вместо ошибки драйвера."""
    try:
        yield
    except DBAPIError as exc:
        await session.rollback()
        APP_LOGGER.error("[%s] database error: %s", action, exc.orig)
        raise translate_db_error(exc, action) from exc


def empty_on_missing_schema(
    action: str,
) -> Callable[[Callable[..., Awaitable[list[T]]]], Callable[..., Awaitable[list[T]]]]:
    """
    Для списков: если таблицы ещё нет, отдаём пустой список и пишем warning.

    Остальные ошибки БД пробрасываются как BackendError.
    """

    def decorator(func: Callable[..., Awaitable[list[T]]]) -> Callable[..., Awaitable[list[T]]]:
        @functools.wraps(func)
        async def wrapper(session: AsyncSession, *args: Any, **kwargs: Any) -> list[T]:
            try:
                return await func(session, *args, **kwargs)
            except DBAPIError as exc:
                await session.rollback()
                if is_schema_missing(exc):
                    APP_LOGGER.warning("[%s] schema missing, returning empty list", action)
                    return []
                APP_LOGGER.error("[%s] database error: %s", action, exc.orig)
                raise translate_db_error(exc, action) from exc

        return wrapper

    return decorator


async def reload(session: AsyncSession, model: type[T], pk: Any) -> T | None:
    """Перечитывает строку из БД вместе с eager-связями, минуя identity map."""
    return await session.get(model, pk, populate_existing=True)
