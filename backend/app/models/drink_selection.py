from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.drink_brand import DrinkBrand
from app.models.profile import Profile


class UserDrinkSelection(Base):
    """Строка заказа: сколько единиц напитка участник берёт на встречу."""

    __tablename__ = "user_drink_selection"
    __table_args__ = (
        UniqueConstraint(
            "spot_id",
            "user_id",
            "drink_brand_id",
            name="uq_drink_selection_spot_user_brand",
        ),
        CheckConstraint("quantity > 0", name="ck_drink_selection_quantity_positive"),
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

    drink_brand_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drink_brand.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    drink_brand: Mapped[DrinkBrand] = relationship(lazy="selectin")

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # цена за единицу фиксируется в момент выбора
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

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
