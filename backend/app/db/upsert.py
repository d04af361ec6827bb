from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(session: AsyncSession, model: type) -> Any:
    dialect = session.get_bind().dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"INSERT ... ON CONFLICT не поддерживается для {dialect}") from None
    return insert(model)


def upsert_stmt(
    session: AsyncSession,
    model: type,
    values: Mapping[str, Any],
    conflict_keys: Iterable[str],
    update_fields: Iterable[str],
) -> Any:
    """
    INSERT ... ON CONFLICT (conflict_keys) DO UPDATE.

    Обновляются только update_fields и updated_at, поэтому повторный вызов
    с теми же аргументами приводит к той же строке.
    """
    stmt = _insert_for(session, model).values(**values)
    set_ = {field: stmt.excluded[field] for field in update_fields}
    if hasattr(model, "updated_at"):
        set_["updated_at"] = datetime.utcnow()
    return stmt.on_conflict_do_update(index_elements=list(conflict_keys), set_=set_)


def insert_ignore_stmt(
    session: AsyncSession,
    model: type,
    values: Mapping[str, Any],
    conflict_keys: Iterable[str],
) -> Any:
    """INSERT ... ON CONFLICT (conflict_keys) DO NOTHING."""
    stmt = _insert_for(session, model).values(**values)
    return stmt.on_conflict_do_nothing(index_elements=list(conflict_keys))
