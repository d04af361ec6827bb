from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BackendError, NotFoundError
from app.db.guards import empty_on_missing_schema, reload, write_guard
from app.db.upsert import insert_ignore_stmt, upsert_stmt
from app.loader import APP_LOGGER
from app.models.invitation import Invitation, InvitationStatus
from app.models.payment import Payment, PaymentStatus
from app.services.selections import refresh_total_best_effort


@empty_on_missing_schema("payments.list")
async def get_payments(session: AsyncSession, spot_id: int) -> list[Payment]:
    """Оплаты по встрече вместе с профилями, в порядке создания."""
    stmt = (
        select(Payment)
        .where(Payment.spot_id == spot_id)
        .order_by(Payment.created_at, Payment.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_payment(session: AsyncSession, spot_id: int, user_id: int) -> Payment | None:
    stmt = (
        select(Payment)
        .where(Payment.spot_id == spot_id, Payment.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_payment(
    session: AsyncSession,
    spot_id: int,
    user_id: int,
    status: PaymentStatus,
) -> Payment:
    """
    Создаёт или обновляет статус оплаты по ключу (spot_id, user_id).

    Статус берётся из аргумента, а drink_total_amount пересчитывается по
    текущему заказу: строка могла появиться уже после выбора напитков.
    """
    async with write_guard(session, "payments.upsert"):
        stmt = upsert_stmt(
            session,
            Payment,
            {"spot_id": spot_id, "user_id": user_id, "status": status},
            conflict_keys=("spot_id", "user_id"),
            update_fields=("status",),
        )
        await session.execute(stmt)
        await session.commit()

    await refresh_total_best_effort(session, spot_id, user_id)

    payment = await get_payment(session, spot_id, user_id)
    if payment is None:
        raise BackendError("Оплата не сохранилась")
    APP_LOGGER.info(
        "[payments.upsert] spot_id=%s user_id=%s status=%s",
        spot_id,
        user_id,
        status.value,
    )
    return payment


async def ensure_payment(session: AsyncSession, spot_id: int, user_id: int) -> None:
    """
    Заводит строку оплаты not_paid, если её ещё нет.

    Существующая строка (в том числе уже оплаченная) остаётся как есть,
    поэтому повторные подтверждения RSVP ничего не дублируют и не сбрасывают.
    """
    async with write_guard(session, "payments.ensure"):
        stmt = insert_ignore_stmt(
            session,
            Payment,
            {
                "spot_id": spot_id,
                "user_id": user_id,
                "status": PaymentStatus.not_paid,
            },
            conflict_keys=("spot_id", "user_id"),
        )
        result = await session.execute(stmt)
        inserted = result.rowcount
        await session.commit()

    # новая строка: подтянуть сумму заказа, сделанного до подтверждения
    if inserted:
        await refresh_total_best_effort(session, spot_id, user_id)


async def bootstrap_payment(session: AsyncSession, spot_id: int, user_id: int) -> bool:
    """
    ensure_payment, который никогда не падает.

    Ошибка логируется и проглатывается: основная операция (RSVP) уже прошла.
    """
    try:
        await ensure_payment(session, spot_id, user_id)
    except Exception:
        APP_LOGGER.exception(
            "[payments.bootstrap] failed spot_id=%s user_id=%s", spot_id, user_id
        )
        return False
    return True


async def bootstrap_payments(session: AsyncSession, spot_id: int) -> int:
    """
    Создаёт недостающие оплаты для всех подтвердивших участников.

    Возвращает число участников, для которых строка оплаты есть после вызова.
    """
    try:
        result = await session.execute(
            select(Invitation.user_id).where(
                Invitation.spot_id == spot_id,
                Invitation.status == InvitationStatus.confirmed,
            )
        )
    except SQLAlchemyError:
        await session.rollback()
        APP_LOGGER.exception("[payments.bootstrap_all] failed to load invitations spot_id=%s", spot_id)
        return 0

    ok = 0
    for user_id in result.scalars().all():
        if await bootstrap_payment(session, spot_id, user_id):
            ok += 1
    return ok


async def update_payment_status(
    session: AsyncSession,
    payment_id: int,
    status: PaymentStatus,
) -> Payment:
    """Смена статуса оплаты (только админ, проверяется на уровне роута)."""
    payment = await session.get(Payment, payment_id)
    if payment is None:
        raise NotFoundError("Оплата не найдена")

    async with write_guard(session, "payments.update_status"):
        payment.status = status
        session.add(payment)
        await session.commit()

    APP_LOGGER.info(
        "[payments.update_status] payment_id=%s status=%s", payment_id, status.value
    )
    return await reload(session, Payment, payment_id)
