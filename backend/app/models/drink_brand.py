import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class DrinkCategory(str, enum.Enum):
    beer = "beer"
    whiskey = "whiskey"
    vodka = "vodka"
    rum = "rum"
    wine = "wine"
    cocktail = "cocktail"
    soft_drink = "soft_drink"
    other = "other"


class DrinkBrand(Base):
    """Позиция каталога напитков, из которой собирается заказ."""

    __tablename__ = "drink_brand"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[DrinkCategory] = mapped_column(
        Enum(DrinkCategory, name="drink_category_enum"),
        nullable=False,
        index=True,
    )
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    base_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_available: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )

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
