from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.profile import Profile


class Drink(Base):
    """Напиток, предложенный участником к встрече, с голосованием."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    spot_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("spot.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(String(512), default="", nullable=False)

    suggested_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    suggester: Mapped[Profile] = relationship(lazy="selectin")

    votes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # id проголосовавших; порядок не важен, дубликатов нет
    voted_by: Mapped[list[int]] = mapped_column(JSON, default=list, nullable=False)

    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

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
