import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.profile import Profile


class Spot(Base):
    """Запланированная встреча: место, дата, время и бюджет на человека."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    day: Mapped[str] = mapped_column(String(16), nullable=False)
    timing: Mapped[str] = mapped_column(String(16), nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)

    created_by: Mapped[int] = mapped_column(
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator: Mapped[Profile] = relationship(lazy="selectin")

    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    feedback: Mapped[str] = mapped_column(Text, default="", nullable=False)

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=dt.datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=dt.datetime.utcnow,
        onupdate=dt.datetime.utcnow,
        nullable=False,
    )
