from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.profile import Profile


class Attendance(Base):
    """Отметка, был ли участник на встрече."""

    __table_args__ = (
        UniqueConstraint("spot_id", "user_id", name="uq_attendance_spot_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    spot_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("spot.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    profile: Mapped[Profile] = relationship(lazy="selectin")

    attended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
