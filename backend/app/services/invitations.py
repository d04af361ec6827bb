from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BackendError, NotFoundError
from app.db.guards import empty_on_missing_schema, reload, write_guard
from app.db.upsert import upsert_stmt
from app.loader import APP_LOGGER
from app.models.invitation import Invitation, InvitationStatus
from app.services.payments import bootstrap_payment


@empty_on_missing_schema("invitations.list")
async def get_invitations(session: AsyncSession, spot_id: int) -> list[Invitation]:
    """Приглашения на встречу с профилями участников."""
    stmt = (
        select(Invitation)
        .where(Invitation.spot_id == spot_id)
        .order_by(Invitation.created_at, Invitation.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_invitation(session: AsyncSession, spot_id: int, user_id: int) -> Invitation | None:
    stmt = (
        select(Invitation)
        .where(Invitation.spot_id == spot_id, Invitation.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_invitation_by_id(session: AsyncSession, invitation_id: int) -> Invitation:
    invitation = await session.get(Invitation, invitation_id)
    if invitation is None:
        raise NotFoundError("Приглашение не найдено")
    return invitation


async def upsert_invitation(
    session: AsyncSession,
    spot_id: int,
    user_id: int,
    status: InvitationStatus,
) -> Invitation:
    """
    RSVP по ключу (spot_id, user_id): создаёт приглашение или меняет статус.

    При переходе в confirmed заводится оплата not_paid (если её нет).
    Сбой этого шага не отменяет и не проваливает сам RSVP.
    """
    async with write_guard(session, "invitations.upsert"):
        stmt = upsert_stmt(
            session,
            Invitation,
            {"spot_id": spot_id, "user_id": user_id, "status": status},
            conflict_keys=("spot_id", "user_id"),
            update_fields=("status",),
        )
        await session.execute(stmt)
        await session.commit()

    APP_LOGGER.info(
        "[invitations.upsert] spot_id=%s user_id=%s status=%s",
        spot_id,
        user_id,
        status.value,
    )

    if status == InvitationStatus.confirmed:
        await bootstrap_payment(session, spot_id, user_id)

    invitation = await get_invitation(session, spot_id, user_id)
    if invitation is None:
        raise BackendError("Приглашение не сохранилось")
    return invitation


async def update_invitation_status(
    session: AsyncSession,
    invitation_id: int,
    status: InvitationStatus,
) -> Invitation:
    """Смена статуса существующего приглашения по его id."""
    invitation = await get_invitation_by_id(session, invitation_id)

    async with write_guard(session, "invitations.update_status"):
        invitation.status = status
        session.add(invitation)
        await session.commit()

    APP_LOGGER.info(
        "[invitations.update_status] invitation_id=%s status=%s",
        invitation_id,
        status.value,
    )

    if status == InvitationStatus.confirmed:
        await bootstrap_payment(session, invitation.spot_id, invitation.user_id)

    return await reload(session, Invitation, invitation_id)


async def get_rsvp_stats(session: AsyncSession, spot_id: int) -> dict[InvitationStatus, int]:
    """Количество приглашений по статусам."""
    stmt = (
        select(Invitation.status, func.count())
        .where(Invitation.spot_id == spot_id)
        .group_by(Invitation.status)
    )
    result = await session.execute(stmt)

    counts = {status: 0 for status in InvitationStatus}
    for status_value, cnt in result.all():
        counts[status_value] = cnt
    return counts
