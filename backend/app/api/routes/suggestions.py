from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import get_current_user, role_required
from app.db.session import get_session
from app.models.cigarette import Cigarette
from app.models.drink import Drink
from app.models.food import Food
from app.models.profile import Profile, UserRole
from app.schemas.drink import (
    AddedItemRead,
    CigaretteCreate,
    DrinkRead,
    PriceUpdate,
    SuggestionCreate,
)
from app.services import catalog as catalog_service
from app.services import spots as spot_service

router = APIRouter(tags=["suggestions"])


# --- drinks -----------------------------------------------------------------


@router.get("/spots/{spot_id}/drinks", response_model=list[DrinkRead])
async def list_drinks(
    spot_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[DrinkRead]:
    drinks = await catalog_service.get_drinks(session, spot_id)
    return [DrinkRead.model_validate(d) for d in drinks]


@router.post(
    "/spots/{spot_id}/drinks",
    response_model=DrinkRead,
    status_code=status.HTTP_201_CREATED,
)
async def suggest_drink(
    spot_id: int,
    payload: SuggestionCreate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DrinkRead:
    await spot_service.get_spot(session, spot_id)
    drink = await catalog_service.create_drink(
        session,
        spot_id=spot_id,
        name=payload.name,
        suggested_by=current_user.id,
        image_url=payload.image_url,
    )
    return DrinkRead.model_validate(drink)


@router.post("/drinks/{drink_id}/vote", response_model=DrinkRead)
async def vote_for_drink(
    drink_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DrinkRead:
    """Голос за напиток; повторный запрос снимает голос."""
    drink = await catalog_service.vote_for_drink(session, drink_id, current_user.id)
    return DrinkRead.model_validate(drink)


@router.put("/drinks/{drink_id}/price", response_model=DrinkRead)
async def set_drink_price(
    drink_id: int,
    payload: PriceUpdate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> DrinkRead:
    drink = await catalog_service.set_item_price(session, Drink, drink_id, payload.price)
    return DrinkRead.model_validate(drink)


@router.delete("/drinks/{drink_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_drink(
    drink_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await catalog_service.delete_drink(session, drink_id, current_user)


# --- food -------------------------------------------------------------------


@router.get("/spots/{spot_id}/foods", response_model=list[AddedItemRead])
async def list_foods(
    spot_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[AddedItemRead]:
    foods = await catalog_service.get_foods(session, spot_id)
    return [AddedItemRead.model_validate(f) for f in foods]


@router.post(
    "/spots/{spot_id}/foods",
    response_model=AddedItemRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_food(
    spot_id: int,
    payload: SuggestionCreate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> AddedItemRead:
    await spot_service.get_spot(session, spot_id)
    food = await catalog_service.create_food(
        session,
        spot_id=spot_id,
        name=payload.name,
        added_by=current_user.id,
        image_url=payload.image_url,
    )
    return AddedItemRead.model_validate(food)


@router.put("/foods/{food_id}/price", response_model=AddedItemRead)
async def set_food_price(
    food_id: int,
    payload: PriceUpdate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> AddedItemRead:
    food = await catalog_service.set_item_price(session, Food, food_id, payload.price)
    return AddedItemRead.model_validate(food)


@router.delete("/foods/{food_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_food(
    food_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await catalog_service.delete_food(session, food_id, current_user)


# --- cigarettes -------------------------------------------------------------


@router.get("/spots/{spot_id}/cigarettes", response_model=list[AddedItemRead])
async def list_cigarettes(
    spot_id: int,
    _: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[AddedItemRead]:
    cigarettes = await catalog_service.get_cigarettes(session, spot_id)
    return [AddedItemRead.model_validate(c) for c in cigarettes]


@router.post(
    "/spots/{spot_id}/cigarettes",
    response_model=AddedItemRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_cigarette(
    spot_id: int,
    payload: CigaretteCreate,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> AddedItemRead:
    await spot_service.get_spot(session, spot_id)
    cigarette = await catalog_service.create_cigarette(
        session,
        spot_id=spot_id,
        image_url=payload.image_url,
        added_by=current_user.id,
        name=payload.name,
    )
    return AddedItemRead.model_validate(cigarette)


@router.put("/cigarettes/{cigarette_id}/price", response_model=AddedItemRead)
async def set_cigarette_price(
    cigarette_id: int,
    payload: PriceUpdate,
    _: Profile = Depends(role_required(UserRole.admin)),
    session: AsyncSession = Depends(get_session),
) -> AddedItemRead:
    cigarette = await catalog_service.set_item_price(
        session, Cigarette, cigarette_id, payload.price
    )
    return AddedItemRead.model_validate(cigarette)


@router.delete("/cigarettes/{cigarette_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cigarette(
    cigarette_id: int,
    current_user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await catalog_service.delete_cigarette(session, cigarette_id, current_user)
