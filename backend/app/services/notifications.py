from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.db.guards import empty_on_missing_schema, write_guard
from app.loader import APP_LOGGER
from app.models.notification import Notification
from app.models.profile import Profile


@empty_on_missing_schema("notifications.list")
async def get_notifications(session: AsyncSession, user_id: int) -> list[Notification]:
    """Уведомления пользователя, новые сверху."""
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_notification(
    session: AsyncSession,
    user_id: int,
    title: str,
    message: str,
) -> Notification:
    notification = Notification(user_id=user_id, title=title, message=message, read=False)
    async with write_guard(session, "notifications.create"):
        session.add(notification)
        await session.commit()
        await session.refresh(notification)
    return notification


async def create_notification_for_all_users(
    session: AsyncSession,
    title: str,
    message: str,
) -> int:
    """
    Одно и то же уведомление каждому профилю.

    Рассылка — побочный эффект: ошибки только логируются, наружу не уходят.
    Возвращает число созданных уведомлений.
    """
    try:
        result = await session.execute(select(Profile.id))
        user_ids = list(result.scalars().all())
        if not user_ids:
            return 0

        session.add_all(
            Notification(user_id=user_id, title=title, message=message, read=False)
            for user_id in user_ids
        )
        await session.commit()
    except Exception:
        await session.rollback()
        APP_LOGGER.exception("[notifications.broadcast] failed title=%s", title)
        return 0

    APP_LOGGER.info("[notifications.broadcast] title=%s recipients=%s", title, len(user_ids))
    return len(user_ids)


async def mark_as_read(session: AsyncSession, notification_id: int, user_id: int) -> Notification:
    notification = await session.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Уведомление не найдено")

    async with write_guard(session, "notifications.mark_read"):
        notification.read = True
        session.add(notification)
        await session.commit()
    return notification


async def mark_all_as_read(session: AsyncSession, user_id: int) -> None:
    async with write_guard(session, "notifications.mark_all_read"):
        await session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        await session.commit()
