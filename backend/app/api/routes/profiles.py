from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user
from app.db.session import get_session
from app.models.profile import Profile
from app.schemas.profile import ProfileRead, ProfileUpdate, UsernameAvailability
from app.schemas.social import MomentCreate, MomentRead
from app.services import moments as moment_service
from app.services import profiles as profile_service

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileRead)
async def read_me(current_user: Profile = Depends(get_current_user)) -> ProfileRead:
    """Профиль текущего пользователя (вместе с mission_count)."""
    return ProfileRead.model_validate(current_user)


@router.put("/me", response_model=ProfileRead)
async def update_me(
    payload: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProfileRead:
    """Обновляет профиль текущего пользователя. mission_count и роль не меняются."""
    profile = await profile_service.update_profile(
        session, current_user, payload.model_dump(exclude_unset=True)
    )
    return ProfileRead.model_validate(profile)


@router.get("/username-available", response_model=UsernameAvailability)
async def check_username(
    username: str = Query(..., min_length=3, max_length=64),
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> UsernameAvailability:
    is_unique = await profile_service.is_username_unique(
        session, username, exclude_id=current_user.id
    )
    return UsernameAvailability(username=username, is_unique=is_unique)


@router.get("/{profile_id}", response_model=ProfileRead)
async def read_profile(
    profile_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProfileRead:
    profile = await profile_service.get_profile(session, profile_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Профиль не найден",
        )
    return ProfileRead.model_validate(profile)


@router.get("/{profile_id}/moments", response_model=list[MomentRead])
async def list_moments(
    profile_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[MomentRead]:
    moments = await moment_service.get_moments(session, profile_id)
    return [MomentRead.model_validate(m) for m in moments]


@router.post("/me/moments", response_model=MomentRead, status_code=status.HTTP_201_CREATED)
async def create_moment(
    payload: MomentCreate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MomentRead:
    moment = await moment_service.create_moment(
        session,
        user_id=current_user.id,
        image_url=payload.image_url,
        caption=payload.caption,
        intel=payload.intel,
    )
    return MomentRead.model_validate(moment)


@router.delete("/me/moments/{moment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_moment(
    moment_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await moment_service.delete_moment(session, moment_id, current_user)
