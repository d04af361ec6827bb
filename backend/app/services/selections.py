"""
Заказ напитков участника на встречу.

Каждая строка заказа уникальна по (spot_id, user_id, drink_brand_id).
После любого изменения строк пересчитывается payment.drink_total_amount
этого участника; ошибка пересчёта не откатывает саму запись.
"""
from decimal import Decimal

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BackendError, ValidationFailedError
from app.db.guards import empty_on_missing_schema, write_guard
from app.db.upsert import upsert_stmt
from app.loader import APP_LOGGER
from app.models.drink_selection import UserDrinkSelection
from app.models.payment import Payment
from app.services.cart import line_total, recompute_drink_total


@empty_on_missing_schema("selections.user_list")
async def get_user_selections(
    session: AsyncSession,
    spot_id: int,
    user_id: int,
) -> list[UserDrinkSelection]:
    """Строки заказа участника вместе с позицией каталога."""
    stmt = (
        select(UserDrinkSelection)
        .where(
            UserDrinkSelection.spot_id == spot_id,
            UserDrinkSelection.user_id == user_id,
        )
        .order_by(UserDrinkSelection.created_at, UserDrinkSelection.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


@empty_on_missing_schema("selections.all")
async def get_all_selections(session: AsyncSession, spot_id: int) -> list[UserDrinkSelection]:
    """Все строки заказа по встрече (для админа): с напитком и профилем."""
    stmt = (
        select(UserDrinkSelection)
        .where(UserDrinkSelection.spot_id == spot_id)
        .order_by(UserDrinkSelection.user_id, UserDrinkSelection.created_at)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_selection(
    session: AsyncSession,
    spot_id: int,
    user_id: int,
    drink_brand_id: int,
) -> UserDrinkSelection | None:
    stmt = (
        select(UserDrinkSelection)
        .where(
            UserDrinkSelection.spot_id == spot_id,
            UserDrinkSelection.user_id == user_id,
            UserDrinkSelection.drink_brand_id == drink_brand_id,
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def refresh_payment_drink_total(
    session: AsyncSession,
    spot_id: int,
    user_id: int,
) -> Decimal:
    """
    payment.drink_total_amount = SUM(total_price) по оставшимся строкам.

    Без строк сумма 0. Повторный вызов без изменений даёт то же значение.
    Если строки оплаты нет, ничего не обновляется.
    """
    lines = await session.execute(
        select(UserDrinkSelection.quantity, UserDrinkSelection.total_price).where(
            UserDrinkSelection.spot_id == spot_id,
            UserDrinkSelection.user_id == user_id,
        )
    )
    total = recompute_drink_total(lines.all())

    await session.execute(
        update(Payment)
        .where(Payment.spot_id == spot_id, Payment.user_id == user_id)
        .values(drink_total_amount=total)
    )
    await session.commit()
    return total


async def refresh_total_best_effort(session: AsyncSession, spot_id: int, user_id: int) -> None:
    try:
        total = await refresh_payment_drink_total(session, spot_id, user_id)
    except Exception:
        await session.rollback()
        APP_LOGGER.exception(
            "[selections.refresh_total] failed spot_id=%s user_id=%s", spot_id, user_id
        )
        return
    APP_LOGGER.info(
        "[selections.refresh_total] spot_id=%s user_id=%s total=%s", spot_id, user_id, total
    )


async def upsert_selection(
    session: AsyncSession,
    spot_id: int,
    user_id: int,
    drink_brand_id: int,
    quantity: int,
    unit_price: Decimal,
) -> UserDrinkSelection:
    """
    Добавляет напиток в заказ или заменяет количество и цену существующей строки.

    quantity должно быть > 0: удаление при нуле делает update_quantity.
    """
    if quantity <= 0:
        raise ValidationFailedError("Количество должно быть больше нуля")

    unit_price = Decimal(unit_price)
    total = line_total(quantity, unit_price)

    async with write_guard(session, "selections.upsert"):
        stmt = upsert_stmt(
            session,
            UserDrinkSelection,
            {
                "spot_id": spot_id,
                "user_id": user_id,
                "drink_brand_id": drink_brand_id,
                "quantity": quantity,
                "unit_price": unit_price,
                "total_price": total,
            },
            conflict_keys=("spot_id", "user_id", "drink_brand_id"),
            update_fields=("quantity", "unit_price", "total_price"),
        )
        await session.execute(stmt)
        await session.commit()

    APP_LOGGER.info(
        "[selections.upsert] spot_id=%s user_id=%s brand_id=%s quantity=%s total=%s",
        spot_id,
        user_id,
        drink_brand_id,
        quantity,
        total,
    )

    await refresh_total_best_effort(session, spot_id, user_id)

    selection = await get_selection(session, spot_id, user_id, drink_brand_id)
    if selection is None:
        raise BackendError("Строка заказа не сохранилась")
    return selection


async def delete_selection(session: AsyncSession, selection_id: int) -> bool:
    """
    Удаляет строку заказа без дополнительных условий.

    Возвращает False, если строки уже не было.
    """
    selection = await session.get(UserDrinkSelection, selection_id)
    if selection is None:
        return False

    spot_id, user_id = selection.spot_id, selection.user_id

    async with write_guard(session, "selections.delete"):
        await session.execute(
            delete(UserDrinkSelection).where(UserDrinkSelection.id == selection_id)
        )
        await session.commit()
    session.expunge(selection)

    APP_LOGGER.info(
        "[selections.delete] selection_id=%s spot_id=%s user_id=%s",
        selection_id,
        spot_id,
        user_id,
    )

    await refresh_total_best_effort(session, spot_id, user_id)
    return True


async def update_quantity(
    session: AsyncSession,
    selection: UserDrinkSelection,
    new_quantity: int,
) -> UserDrinkSelection | None:
    """
    Меняет количество строки: 0 и меньше удаляют её из заказа.

    Цена за единицу остаётся той, что была зафиксирована при выборе.
    """
    if new_quantity <= 0:
        await delete_selection(session, selection.id)
        return None

    return await upsert_selection(
        session,
        spot_id=selection.spot_id,
        user_id=selection.user_id,
        drink_brand_id=selection.drink_brand_id,
        quantity=new_quantity,
        unit_price=selection.unit_price,
    )
