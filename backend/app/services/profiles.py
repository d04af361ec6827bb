from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationFailedError
from app.core.security import hash_password
from app.db.guards import reload, write_guard
from app.loader import APP_LOGGER
from app.models.profile import Profile, UserRole

# mission_count и role через профиль не меняются
EDITABLE_FIELDS = (
    "name",
    "username",
    "phone",
    "email",
    "profile_pic_url",
    "location",
    "date_of_birth",
    "about",
    "latitude",
    "longitude",
)

DEFAULT_AVATAR = "https://api.dicebear.com/7.x/thumbs/svg?seed=default"


async def get_profile(session: AsyncSession, profile_id: int) -> Profile | None:
    return await session.get(Profile, profile_id, populate_existing=True)


async def find_by_login(session: AsyncSession, login: str) -> Profile | None:
    """Профиль по username или телефону (только для входа)."""
    value = login.strip()
    stmt = select(Profile).where(
        or_(Profile.username == value.lower(), Profile.phone == value)
    )
    result = await session.execute(stmt)
    return result.scalars().first()


async def is_username_unique(
    session: AsyncSession,
    username: str,
    exclude_id: int | None = None,
) -> bool:
    stmt = select(Profile.id).where(Profile.username == username.strip().lower())
    if exclude_id is not None:
        stmt = stmt.where(Profile.id != exclude_id)
    result = await session.execute(stmt)
    return result.first() is None


async def is_phone_taken(
    session: AsyncSession,
    phone: str,
    exclude_id: int | None = None,
) -> bool:
    stmt = select(Profile.id).where(Profile.phone == phone.strip())
    if exclude_id is not None:
        stmt = stmt.where(Profile.id != exclude_id)
    result = await session.execute(stmt)
    return result.first() is not None


async def create_profile(
    session: AsyncSession,
    *,
    name: str,
    username: str,
    phone: str,
    password: str,
    email: str | None = None,
    profile_pic_url: str | None = None,
    role: UserRole = UserRole.user,
) -> Profile:
    username = username.strip().lower()
    if not await is_username_unique(session, username):
        raise ValidationFailedError("Такой username уже занят")

    if await is_phone_taken(session, phone):
        raise ValidationFailedError("Пользователь с таким телефоном уже существует")

    profile = Profile(
        name=name,
        username=username,
        phone=phone,
        email=email,
        hashed_password=hash_password(password),
        profile_pic_url=profile_pic_url or DEFAULT_AVATAR,
        role=role,
    )
    async with write_guard(session, "profiles.create"):
        session.add(profile)
        await session.commit()
        await session.refresh(profile)

    APP_LOGGER.info("[profiles.create] profile_id=%s username=%s", profile.id, username)
    return profile


async def update_profile(
    session: AsyncSession,
    profile: Profile,
    changes: dict[str, Any],
) -> Profile:
    """Обновление своего профиля: только разрешённые поля."""
    if changes.get("username"):
        changes["username"] = changes["username"].strip().lower()
        if not await is_username_unique(session, changes["username"], exclude_id=profile.id):
            raise ValidationFailedError("Такой username уже занят")

    if changes.get("phone"):
        changes["phone"] = changes["phone"].strip()
        if await is_phone_taken(session, changes["phone"], exclude_id=profile.id):
            raise ValidationFailedError("Пользователь с таким телефоном уже существует")

    async with write_guard(session, "profiles.update"):
        for key, value in changes.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(profile, key, value)
        session.add(profile)
        await session.commit()

    refreshed = await reload(session, Profile, profile.id)
    if refreshed is None:
        raise NotFoundError("Профиль не найден")
    return refreshed
