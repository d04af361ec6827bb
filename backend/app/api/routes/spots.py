from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import ensure_owner_or_admin, get_current_user, role_required
from app.db.session import get_session
from app.models.invitation import InvitationStatus
from app.models.profile import Profile, UserRole
from app.schemas.spot import SpotCreate, SpotRead, SpotUpdate
from app.schemas.status import (
    AttendanceMutate,
    AttendanceRead,
    InvitationMutate,
    InvitationRead,
    RSVPStats,
)
from app.services import attendance as attendance_service
from app.services import invitations as invitation_service
from app.services import spots as spot_service

router = APIRouter(
    prefix="/spots",
    tags=["spots"],
)


@router.get("/upcoming", response_model=SpotRead | None)
async def get_upcoming_spot(
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SpotRead | None:
    """Ближайшая встреча (или null, если ничего не запланировано)."""
    spot = await spot_service.get_upcoming_spot(session)
    if spot is None:
        return None
    return SpotRead.model_validate(spot)


@router.get("/", response_model=list[SpotRead])
async def list_upcoming_spots(
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[SpotRead]:
    spots = await spot_service.get_upcoming_spots(session)
    return [SpotRead.model_validate(s) for s in spots]


@router.get("/past", response_model=list[SpotRead])
async def list_past_spots(
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[SpotRead]:
    """История встреч, последние сверху."""
    spots = await spot_service.get_past_spots(session)
    return [SpotRead.model_validate(s) for s in spots]


@router.get("/{spot_id}", response_model=SpotRead)
async def get_spot(
    spot_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SpotRead:
    spot = await spot_service.get_spot(session, spot_id)
    return SpotRead.model_validate(spot)


@router.post("/", response_model=SpotRead, status_code=status.HTTP_201_CREATED)
async def create_spot(
    payload: SpotCreate,
    current_user: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> SpotRead:
    """
    Создание встречи админом.

    Все участники получают приглашение pending, создатель сразу confirmed.
    """
    spot = await spot_service.create_spot(session, current_user, payload.model_dump())
    return SpotRead.model_validate(spot)


@router.patch("/{spot_id}", response_model=SpotRead)
async def update_spot(
    spot_id: int,
    payload: SpotUpdate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> SpotRead:
    """Частичное обновление встречи (в том числе отзыв после неё)."""
    spot = await spot_service.update_spot(
        session, spot_id, payload.model_dump(exclude_unset=True)
    )
    return SpotRead.model_validate(spot)


@router.delete("/{spot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_spot(
    spot_id: int,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> None:
    await spot_service.delete_spot(session, spot_id)


# --- RSVP -------------------------------------------------------------------


@router.get("/{spot_id}/invitations", response_model=list[InvitationRead])
async def list_invitations(
    spot_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[InvitationRead]:
    invitations = await invitation_service.get_invitations(session, spot_id)
    return [InvitationRead.model_validate(i) for i in invitations]


@router.post("/{spot_id}/rsvp", response_model=InvitationRead)
async def set_rsvp(
    spot_id: int,
    payload: InvitationMutate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> InvitationRead:
    """
    RSVP текущего пользователя: создаёт приглашение или меняет его статус.

    confirmed дополнительно заводит оплату (если её ещё нет).
    """
    await spot_service.get_spot(session, spot_id)
    invitation = await invitation_service.upsert_invitation(
        session, spot_id, current_user.id, payload.status
    )
    return InvitationRead.model_validate(invitation)


@router.get("/{spot_id}/rsvp/stats", response_model=RSVPStats)
async def get_rsvp_stats(
    spot_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> RSVPStats:
    counts = await invitation_service.get_rsvp_stats(session, spot_id)
    return RSVPStats(
        pending=counts[InvitationStatus.pending],
        confirmed=counts[InvitationStatus.confirmed],
        declined=counts[InvitationStatus.declined],
    )


# --- attendance -------------------------------------------------------------


@router.get("/{spot_id}/attendance", response_model=list[AttendanceRead])
async def list_attendance(
    spot_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[AttendanceRead]:
    records = await attendance_service.get_attendance(session, spot_id)
    return [AttendanceRead.model_validate(r) for r in records]


@router.get("/{spot_id}/attendance/me", response_model=AttendanceRead | None)
async def get_my_attendance(
    spot_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> AttendanceRead | None:
    """Своя отметка посещения (или null, если ещё не отмечался)."""
    record = await attendance_service.get_user_attendance(session, spot_id, current_user.id)
    if record is None:
        return None
    return AttendanceRead.model_validate(record)


@router.put("/{spot_id}/attendance/me", response_model=AttendanceRead)
async def set_my_attendance(
    spot_id: int,
    payload: AttendanceMutate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> AttendanceRead:
    spot = await spot_service.get_spot(session, spot_id)
    record = await attendance_service.upsert_attendance(
        session,
        spot,
        current_user.id,
        payload.attended,
        allow_before_date=current_user.role == UserRole.admin,
    )
    return AttendanceRead.model_validate(record)


invitations_router = APIRouter(prefix="/invitations", tags=["spots"])


@invitations_router.patch("/{invitation_id}", response_model=InvitationRead)
async def update_invitation_status(
    invitation_id: int,
    payload: InvitationMutate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> InvitationRead:
    """Смена статуса приглашения: своё — участник, любое — админ."""
    existing = await invitation_service.get_invitation_by_id(session, invitation_id)
    ensure_owner_or_admin(current_user, existing.user_id, "Нельзя менять чужой RSVP")

    invitation = await invitation_service.update_invitation_status(
        session, invitation_id, payload.status
    )
    return InvitationRead.model_validate(invitation)
