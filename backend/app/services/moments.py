from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, PermissionDeniedError
from app.db.guards import empty_on_missing_schema, write_guard
from app.models.moment import Moment
from app.models.profile import Profile, UserRole


@empty_on_missing_schema("moments.list")
async def get_moments(session: AsyncSession, user_id: int) -> list[Moment]:
    stmt = (
        select(Moment)
        .where(Moment.user_id == user_id)
        .order_by(Moment.created_at.desc(), Moment.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_moment(
    session: AsyncSession,
    user_id: int,
    image_url: str,
    caption: str | None = None,
    intel: str | None = None,
) -> Moment:
    # intel по умолчанию совпадает с подписью
    moment = Moment(
        user_id=user_id,
        image_url=image_url,
        caption=caption,
        intel=intel if intel is not None else caption,
    )
    async with write_guard(session, "moments.create"):
        session.add(moment)
        await session.commit()
        await session.refresh(moment)
    return moment


async def delete_moment(session: AsyncSession, moment_id: int, actor: Profile) -> None:
    moment = await session.get(Moment, moment_id)
    if moment is None:
        raise NotFoundError("Момент не найден")
    if actor.role != UserRole.admin and moment.user_id != actor.id:
        raise PermissionDeniedError("Удалять можно только свои моменты")

    async with write_guard(session, "moments.delete"):
        await session.delete(moment)
        await session.commit()
