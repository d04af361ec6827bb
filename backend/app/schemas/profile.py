from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.profile import UserRole


class ProfileBrief(BaseModel):
    """Профиль в составе приглашений, оплат и заказов."""

    id: int
    name: str
    username: str
    phone: str
    email: str | None = None
    role: UserRole
    profile_pic_url: str | None = None
    location: str
    mission_count: int = 0

    class Config:
        from_attributes = True


class ProfileRead(ProfileBrief):
    date_of_birth: date | None = None
    about: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)
    phone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)
    profile_pic_url: str | None = Field(default=None, max_length=512)
    location: str | None = Field(default=None, max_length=255)
    date_of_birth: date | None = None
    about: str | None = Field(default=None, max_length=2000)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class UsernameAvailability(BaseModel):
    username: str
    is_unique: bool
