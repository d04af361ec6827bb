from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.drink_brand import DrinkCategory
from app.schemas.profile import ProfileBrief


class DrinkBrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: DrinkCategory
    image_url: str | None = Field(default=None, max_length=512)
    base_price: Decimal = Field(default=Decimal("0"), ge=0)
    description: str | None = Field(default=None, max_length=2000)
    is_available: bool = True


class DrinkBrandUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    category: DrinkCategory | None = None
    image_url: str | None = Field(default=None, max_length=512)
    base_price: Decimal | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=2000)
    is_available: bool | None = None


class DrinkBrandRead(BaseModel):
    id: int
    name: str
    category: DrinkCategory
    image_url: str | None
    base_price: Decimal
    description: str | None
    is_available: bool

    class Config:
        from_attributes = True


class SelectionUpsert(BaseModel):
    """Добавление напитка в заказ: цену клиент не передаёт, её даёт каталог."""

    drink_brand_id: int = Field(..., ge=1)
    quantity: int = Field(default=1, ge=1)


class SelectionQuantityUpdate(BaseModel):
    # 0 и меньше удаляют строку
    quantity: int


class SelectionRead(BaseModel):
    id: int
    spot_id: int
    user_id: int
    drink_brand_id: int
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    drink_brand: DrinkBrandRead
    profile: ProfileBrief | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CartSummary(BaseModel):
    items: list[SelectionRead]
    item_count: int
    amount: Decimal


class SuggestionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    image_url: str = Field(default="", max_length=512)


class CigaretteCreate(BaseModel):
    image_url: str = Field(..., min_length=1, max_length=512)
    name: str | None = Field(default=None, max_length=255)


class PriceUpdate(BaseModel):
    price: Decimal | None = Field(default=None, ge=0)


class DrinkRead(BaseModel):
    id: int
    spot_id: int
    name: str
    image_url: str
    votes: int
    suggested_by: int
    voted_by: list[int]
    price: Decimal | None
    suggester: ProfileBrief | None = None

    class Config:
        from_attributes = True


class AddedItemRead(BaseModel):
    """Еда или сигареты."""

    id: int
    spot_id: int
    name: str
    image_url: str
    added_by: int
    price: Decimal | None
    adder: ProfileBrief | None = None
    created_at: datetime

    class Config:
        from_attributes = True
