from datetime import date

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BackendError, ValidationFailedError
from app.db.guards import empty_on_missing_schema, write_guard
from app.db.upsert import upsert_stmt
from app.loader import APP_LOGGER
from app.models.attendance import Attendance
from app.models.profile import Profile
from app.models.spot import Spot


def should_increment_mission_count(old: bool | None, new: bool) -> bool:
    """Счётчик растёт только при переходе из «не был/не отмечен» в «был»."""
    return new is True and old is not True


@empty_on_missing_schema("attendance.list")
async def get_attendance(session: AsyncSession, spot_id: int) -> list[Attendance]:
    """Отметки посещения по встрече с профилями."""
    stmt = (
        select(Attendance)
        .where(Attendance.spot_id == spot_id)
        .order_by(Attendance.created_at, Attendance.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_user_attendance(
    session: AsyncSession,
    spot_id: int,
    user_id: int,
) -> Attendance | None:
    """Отметка участника; None — ещё не отмечался (это не ошибка)."""
    stmt = (
        select(Attendance)
        .where(Attendance.spot_id == spot_id, Attendance.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _increment_mission_count(session: AsyncSession, user_id: int) -> None:
    try:
        await session.execute(
            update(Profile)
            .where(Profile.id == user_id)
            .values(mission_count=Profile.mission_count + 1)
        )
        await session.commit()
    except Exception:
        await session.rollback()
        APP_LOGGER.exception("[attendance.mission_count] failed user_id=%s", user_id)
        return
    APP_LOGGER.info("[attendance.mission_count] incremented user_id=%s", user_id)


async def upsert_attendance(
    session: AsyncSession,
    spot: Spot,
    user_id: int,
    attended: bool,
    *,
    today: date | None = None,
    allow_before_date: bool = False,
) -> Attendance:
    """
    Отметка «был / не был» по ключу (spot_id, user_id).

    Отмечаться можно после даты встречи (админ в любой момент).
    mission_count растёт ровно на 1 при первом переходе в attended=True,
    повторная запись True его не меняет.
    """
    today = today or date.today()
    if not allow_before_date and spot.date > today:
        raise ValidationFailedError("Отметить посещение можно только после встречи")

    previous = await get_user_attendance(session, spot.id, user_id)
    old_value = previous.attended if previous is not None else None

    async with write_guard(session, "attendance.upsert"):
        stmt = upsert_stmt(
            session,
            Attendance,
            {"spot_id": spot.id, "user_id": user_id, "attended": attended},
            conflict_keys=("spot_id", "user_id"),
            update_fields=("attended",),
        )
        await session.execute(stmt)
        await session.commit()

    APP_LOGGER.info(
        "[attendance.upsert] spot_id=%s user_id=%s attended=%s previous=%s",
        spot.id,
        user_id,
        attended,
        old_value,
    )

    if should_increment_mission_count(old_value, attended):
        await _increment_mission_count(session, user_id)

    record = await get_user_attendance(session, spot.id, user_id)
    if record is None:
        raise BackendError("Отметка посещения не сохранилась")
    return record
