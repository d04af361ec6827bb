from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.db.session import get_session
from app.models.profile import Profile
from app.schemas.social import NotificationRead
from app.services import notifications as notification_service

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
)


@router.get("/", response_model=list[NotificationRead])
async def list_my_notifications(
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[NotificationRead]:
    notifications = await notification_service.get_notifications(session, current_user.id)
    return [NotificationRead.model_validate(n) for n in notifications]


@router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_as_read(
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await notification_service.mark_all_as_read(session, current_user.id)


@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_as_read(
    notification_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> NotificationRead:
    """Чужие уведомления для пользователя не существуют (404)."""
    notification = await notification_service.mark_as_read(
        session, notification_id, current_user.id
    )
    return NotificationRead.model_validate(notification)
