from collections.abc import Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_token
from app.db.session import get_session
from app.loader import APP_LOGGER
from app.models.profile import Profile, UserRole
from app.schemas.auth import TokenPayload

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Profile:
    """
    Профиль текущего пользователя по access-токену.

    Резолвится заново на каждый запрос: `sub` — id профиля,
    никаких поисков по телефону/email и автосоздания профиля.
    """
    payload_data = decode_token(token)
    if payload_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Невалидный токен",
        )

    payload = TokenPayload(**payload_data)
    if payload.sub is None or not payload.sub.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Невалидный токен",
        )

    profile = await session.get(Profile, int(payload.sub), populate_existing=True)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Профиль не найден",
        )

    return profile


def role_required(*roles: UserRole | str) -> Callable[..., Any]:
    """
    Проверка роли пользователя.
    Принимает и Enum, и строки ('admin', 'user').
    """

    allowed_roles = {r.value if isinstance(r, UserRole) else r for r in roles}

    async def dependency(current_user: Profile = Depends(get_current_user)) -> Profile:
        raw_role = current_user.role
        current_role = raw_role.value if isinstance(raw_role, UserRole) else raw_role

        if current_role not in allowed_roles:
            APP_LOGGER.warning(
                "[role_required] access denied user_id=%s role=%s allowed=%s",
                current_user.id,
                current_role,
                sorted(allowed_roles),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Недостаточно прав",
            )
        return current_user

    return dependency


def ensure_owner_or_admin(current_user: Profile, owner_id: int, detail: str) -> None:
    """403, если пользователь не владелец записи и не админ."""
    if current_user.role != UserRole.admin and current_user.id != owner_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
