import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.profile import ProfileBrief


class SpotCreate(BaseModel):
    """Данные для создания встречи."""

    date: dt.date
    day: str | None = Field(default=None, max_length=16)
    timing: str = Field(default="21:00", pattern=r"^\d{2}:\d{2}$")
    budget: Decimal = Field(..., ge=0)
    location: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class SpotUpdate(BaseModel):
    """Частичное обновление встречи (все поля опциональны)."""

    date: dt.date | None = None
    day: str | None = Field(default=None, max_length=16)
    timing: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    budget: Decimal | None = Field(default=None, ge=0)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    feedback: str | None = Field(default=None, max_length=5000)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class SpotRead(BaseModel):
    id: int
    date: dt.date
    day: str
    timing: str
    budget: Decimal
    location: str
    created_by: int
    creator: ProfileBrief | None = None
    description: str
    feedback: str
    latitude: float | None
    longitude: float | None
    created_at: dt.datetime

    class Config:
        from_attributes = True
