from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import ensure_owner_or_admin, get_current_user, role_required
from app.db.session import get_session
from app.models.drink_brand import DrinkCategory
from app.models.drink_selection import UserDrinkSelection
from app.models.profile import Profile, UserRole
from app.schemas.drink import (
    CartSummary,
    DrinkBrandCreate,
    DrinkBrandRead,
    DrinkBrandUpdate,
    SelectionQuantityUpdate,
    SelectionRead,
    SelectionUpsert,
)
from app.services import catalog as catalog_service
from app.services import selections as selection_service
from app.services import spots as spot_service
from app.services.cart import cart_amount, cart_item_count

router = APIRouter(tags=["drinks"])


def _summary(lines: list[UserDrinkSelection]) -> CartSummary:
    return CartSummary(
        items=[SelectionRead.model_validate(line) for line in lines],
        item_count=cart_item_count(lines),
        amount=cart_amount(lines),
    )


# --- drink brands -----------------------------------------------------------


@router.get("/drink-brands", response_model=list[DrinkBrandRead])
async def list_drink_brands(
    category: DrinkCategory | None = Query(default=None),
    only_available: bool = Query(default=True),
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[DrinkBrandRead]:
    brands = await catalog_service.get_drink_brands(
        session, category=category, only_available=only_available
    )
    return [DrinkBrandRead.model_validate(b) for b in brands]


@router.get("/drink-brands/{brand_id}", response_model=DrinkBrandRead)
async def get_drink_brand(
    brand_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DrinkBrandRead:
    brand = await catalog_service.get_drink_brand(session, brand_id)
    return DrinkBrandRead.model_validate(brand)


@router.post(
    "/drink-brands",
    response_model=DrinkBrandRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_drink_brand(
    payload: DrinkBrandCreate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> DrinkBrandRead:
    brand = await catalog_service.create_drink_brand(session, payload.model_dump())
    return DrinkBrandRead.model_validate(brand)


@router.patch("/drink-brands/{brand_id}", response_model=DrinkBrandRead)
async def update_drink_brand(
    brand_id: int,
    payload: DrinkBrandUpdate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> DrinkBrandRead:
    brand = await catalog_service.update_drink_brand(
        session, brand_id, payload.model_dump(exclude_unset=True)
    )
    return DrinkBrandRead.model_validate(brand)


@router.delete("/drink-brands/{brand_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_drink_brand(
    brand_id: int,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> None:
    await catalog_service.delete_drink_brand(session, brand_id)


# --- cart -------------------------------------------------------------------


@router.get("/spots/{spot_id}/cart", response_model=CartSummary)
async def get_my_cart(
    spot_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> CartSummary:
    """Заказ текущего пользователя: строки, число единиц и сумма."""
    lines = await selection_service.get_user_selections(session, spot_id, current_user.id)
    return _summary(lines)


@router.post("/spots/{spot_id}/cart", response_model=CartSummary)
async def add_to_cart(
    spot_id: int,
    payload: SelectionUpsert,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> CartSummary:
    """
    Добавляет напиток в заказ (или заменяет количество уже выбранного).

    Цена за единицу фиксируется по текущей base_price из каталога.
    """
    await spot_service.get_spot(session, spot_id)
    brand = await catalog_service.get_drink_brand(session, payload.drink_brand_id)
    if not brand.is_available:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Напиток сейчас недоступен",
        )

    await selection_service.upsert_selection(
        session,
        spot_id=spot_id,
        user_id=current_user.id,
        drink_brand_id=brand.id,
        quantity=payload.quantity,
        unit_price=brand.base_price,
    )

    lines = await selection_service.get_user_selections(session, spot_id, current_user.id)
    return _summary(lines)


@router.get("/spots/{spot_id}/selections", response_model=list[SelectionRead])
async def list_all_selections(
    spot_id: int,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> list[SelectionRead]:
    """Все заказы по встрече: сводка для закупки."""
    lines = await selection_service.get_all_selections(session, spot_id)
    return [SelectionRead.model_validate(line) for line in lines]


async def _owned_selection(
    session: AsyncSession,
    selection_id: int,
    current_user: Profile,
) -> UserDrinkSelection:
    selection = await session.get(UserDrinkSelection, selection_id)
    if selection is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Строка заказа не найдена",
        )
    ensure_owner_or_admin(current_user, selection.user_id, "Нельзя менять чужой заказ")
    return selection


@router.patch("/selections/{selection_id}", response_model=SelectionRead | None)
async def update_selection_quantity(
    selection_id: int,
    payload: SelectionQuantityUpdate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> SelectionRead | None:
    """Новое количество; 0 и меньше убирают напиток из заказа (ответ null)."""
    selection = await _owned_selection(session, selection_id, current_user)
    updated = await selection_service.update_quantity(session, selection, payload.quantity)
    if updated is None:
        return None
    return SelectionRead.model_validate(updated)


@router.delete("/selections/{selection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_selection(
    selection_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await _owned_selection(session, selection_id, current_user)
    await selection_service.delete_selection(session, selection_id)
