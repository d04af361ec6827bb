"""
Встречи (spots): создание с приглашениями для всех, правки и удаление.

Создавать, менять и удалять встречи может только админ, проверка в роутах.
"""
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.db.guards import empty_on_missing_schema, reload, write_guard
from app.db.upsert import insert_ignore_stmt
from app.loader import APP_LOGGER
from app.models.invitation import Invitation, InvitationStatus
from app.models.profile import Profile
from app.models.spot import Spot
from app.services.payments import bootstrap_payment
from app.services.notifications import create_notification_for_all_users

SPOT_FIELDS = (
    "date",
    "day",
    "timing",
    "budget",
    "location",
    "description",
    "feedback",
    "latitude",
    "longitude",
)


def weekday_name(value: date) -> str:
    return value.strftime("%A")


async def get_spot(session: AsyncSession, spot_id: int) -> Spot:
    spot = await session.get(Spot, spot_id)
    if spot is None:
        raise NotFoundError("Встреча не найдена")
    return spot


async def get_upcoming_spot(session: AsyncSession, today: date | None = None) -> Spot | None:
    """Ближайшая встреча с датой не раньше сегодняшней; None, если её нет."""
    spots = await get_upcoming_spots(session, today=today)
    return spots[0] if spots else None


@empty_on_missing_schema("spots.upcoming")
async def get_upcoming_spots(session: AsyncSession, today: date | None = None) -> list[Spot]:
    stmt = (
        select(Spot)
        .where(Spot.date >= (today or date.today()))
        .order_by(Spot.date.asc(), Spot.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


@empty_on_missing_schema("spots.past")
async def get_past_spots(session: AsyncSession, today: date | None = None) -> list[Spot]:
    """Прошедшие встречи, последние сверху."""
    stmt = (
        select(Spot)
        .where(Spot.date < (today or date.today()))
        .order_by(Spot.date.desc(), Spot.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _invite_everyone(session: AsyncSession, spot_id: int, creator_id: int) -> None:
    result = await session.execute(select(Profile.id))
    for user_id in result.scalars().all():
        status = (
            InvitationStatus.confirmed if user_id == creator_id else InvitationStatus.pending
        )
        await session.execute(
            insert_ignore_stmt(
                session,
                Invitation,
                {
                    "spot_id": spot_id,
                    "user_id": user_id,
                    "status": status,
                },
                conflict_keys=("spot_id", "user_id"),
            )
        )


async def create_spot(session: AsyncSession, creator: Profile, data: dict[str, Any]) -> Spot:
    """
    Создаёт встречу.

    - всем профилям заводится приглашение pending;
    - приглашение создателя сразу confirmed, минуя pending, и для него заводится оплата;
    - всем уходит уведомление о новой встрече.
    """
    values = {key: data[key] for key in SPOT_FIELDS if data.get(key) is not None}
    values.setdefault("day", weekday_name(values["date"]))

    spot = Spot(created_by=creator.id, **values)

    async with write_guard(session, "spots.create"):
        session.add(spot)
        await session.flush()
        await _invite_everyone(session, spot.id, creator.id)
        await session.commit()

    APP_LOGGER.info(
        "[spots.create] spot_id=%s created_by=%s date=%s", spot.id, creator.id, spot.date
    )

    await bootstrap_payment(session, spot.id, creator.id)

    await create_notification_for_all_users(
        session,
        "New Spot Created!",
        f"A new spot has been created at {spot.location} on {spot.date.isoformat()}",
    )
    return await reload(session, Spot, spot.id)


async def update_spot(session: AsyncSession, spot_id: int, changes: dict[str, Any]) -> Spot:
    """Частичное обновление: меняются только переданные поля."""
    spot = await get_spot(session, spot_id)

    async with write_guard(session, "spots.update"):
        for key, value in changes.items():
            if key in SPOT_FIELDS and value is not None:
                setattr(spot, key, value)
        if "date" in changes and "day" not in changes and changes["date"] is not None:
            spot.day = weekday_name(spot.date)
        session.add(spot)
        await session.commit()

    APP_LOGGER.info("[spots.update] spot_id=%s fields=%s", spot_id, sorted(changes))

    await create_notification_for_all_users(
        session, "Spot Updated", f"Spot at {spot.location} has been updated"
    )
    return await reload(session, Spot, spot_id)


async def delete_spot(session: AsyncSession, spot_id: int) -> None:
    """Удаляет встречу; приглашения, оплаты, заказы и прочее удаляются каскадом."""
    spot = await get_spot(session, spot_id)
    location = spot.location

    async with write_guard(session, "spots.delete"):
        await session.delete(spot)
        await session.commit()

    APP_LOGGER.info("[spots.delete] spot_id=%s", spot_id)

    await create_notification_for_all_users(
        session, "Spot Deleted", f"Spot at {location} has been deleted"
    )
