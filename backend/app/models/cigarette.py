from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.profile import Profile


class Cigarette(Base):
    """Сигареты к встрече (фото пачки и цена от админа)."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    spot_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("spot.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), default="Cigarette Pack", nullable=False)
    image_url: Mapped[str] = mapped_column(String(512), default="", nullable=False)

    added_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    adder: Mapped[Profile] = relationship(lazy="selectin")

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
