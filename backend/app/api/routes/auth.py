from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_profile_token, verify_password
from app.db.session import get_session
from app.loader import APP_LOGGER
from app.schemas.auth import RegisterRequest, Token
from app.schemas.profile import ProfileRead
from app.services import profiles as profile_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> ProfileRead:
    """Регистрация по телефону и username (email необязателен)."""
    profile = await profile_service.create_profile(
        session,
        name=payload.name,
        username=payload.username,
        phone=payload.phone.strip(),
        password=payload.password,
        email=payload.email,
        profile_pic_url=payload.profile_pic_url,
    )
    return ProfileRead.model_validate(profile)


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
) -> Token:
    # в поле username можно передать username или телефон
    profile = await profile_service.find_by_login(session, form_data.username)

    if profile is None or not verify_password(form_data.password, profile.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Неверный логин или пароль",
        )

    APP_LOGGER.info("[auth.login] profile_id=%s", profile.id)
    return Token(access_token=create_profile_token(profile.id, profile.role.value))
