"""
Каталог: позиции для заказа (drink_brand) и то, что участники предлагают
к встрече сами (drink, food, cigarette).
"""
from decimal import Decimal
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, PermissionDeniedError
from app.db.guards import empty_on_missing_schema, reload, write_guard
from app.loader import APP_LOGGER
from app.models.cigarette import Cigarette
from app.models.drink import Drink
from app.models.drink_brand import DrinkBrand, DrinkCategory
from app.models.food import Food
from app.models.profile import Profile, UserRole
from app.services.votes import VoterSet, next_vote_count

Item = TypeVar("Item", Drink, Food, Cigarette)

BRAND_FIELDS = ("name", "category", "image_url", "base_price", "description", "is_available")


# ---------------------------------------------------------------------------
# drink brands
# ---------------------------------------------------------------------------


@empty_on_missing_schema("drink_brands.list")
async def get_drink_brands(
    session: AsyncSession,
    category: DrinkCategory | None = None,
    only_available: bool = True,
) -> list[DrinkBrand]:
    stmt = select(DrinkBrand)
    if category is not None:
        stmt = stmt.where(DrinkBrand.category == category)
    if only_available:
        stmt = stmt.where(DrinkBrand.is_available.is_(True))
    stmt = stmt.order_by(DrinkBrand.category, DrinkBrand.name)

    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_drink_brand(session: AsyncSession, brand_id: int) -> DrinkBrand:
    brand = await session.get(DrinkBrand, brand_id)
    if brand is None:
        raise NotFoundError("Напиток не найден в каталоге")
    return brand


async def create_drink_brand(session: AsyncSession, data: dict[str, Any]) -> DrinkBrand:
    brand = DrinkBrand(**{key: data[key] for key in BRAND_FIELDS if key in data})
    async with write_guard(session, "drink_brands.create"):
        session.add(brand)
        await session.commit()
        await session.refresh(brand)
    APP_LOGGER.info("[drink_brands.create] brand_id=%s name=%s", brand.id, brand.name)
    return brand


async def update_drink_brand(
    session: AsyncSession,
    brand_id: int,
    changes: dict[str, Any],
) -> DrinkBrand:
    brand = await get_drink_brand(session, brand_id)
    async with write_guard(session, "drink_brands.update"):
        for key, value in changes.items():
            if key in BRAND_FIELDS and value is not None:
                setattr(brand, key, value)
        session.add(brand)
        await session.commit()
        await session.refresh(brand)
    return brand


async def delete_drink_brand(session: AsyncSession, brand_id: int) -> None:
    brand = await get_drink_brand(session, brand_id)
    async with write_guard(session, "drink_brands.delete"):
        await session.delete(brand)
        await session.commit()
    APP_LOGGER.info("[drink_brands.delete] brand_id=%s", brand_id)


# ---------------------------------------------------------------------------
# suggested drinks / food / cigarettes
# ---------------------------------------------------------------------------


def _creator_id(item: Drink | Food | Cigarette) -> int:
    return item.suggested_by if isinstance(item, Drink) else item.added_by


async def _get_item(session: AsyncSession, model: type[Item], item_id: int) -> Item:
    item = await session.get(model, item_id)
    if item is None:
        raise NotFoundError("Позиция не найдена")
    return item


@empty_on_missing_schema("drinks.list")
async def get_drinks(session: AsyncSession, spot_id: int) -> list[Drink]:
    """Предложенные напитки, самые популярные сверху."""
    stmt = (
        select(Drink)
        .where(Drink.spot_id == spot_id)
        .order_by(Drink.votes.desc(), Drink.id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


@empty_on_missing_schema("foods.list")
async def get_foods(session: AsyncSession, spot_id: int) -> list[Food]:
    stmt = select(Food).where(Food.spot_id == spot_id).order_by(Food.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


@empty_on_missing_schema("cigarettes.list")
async def get_cigarettes(session: AsyncSession, spot_id: int) -> list[Cigarette]:
    stmt = (
        select(Cigarette)
        .where(Cigarette.spot_id == spot_id)
        .order_by(Cigarette.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _create_item(session: AsyncSession, item: Item, action: str) -> Item:
    async with write_guard(session, action):
        session.add(item)
        await session.commit()
    APP_LOGGER.info("[%s] id=%s spot_id=%s", action, item.id, item.spot_id)
    return await reload(session, type(item), item.id)


async def create_drink(
    session: AsyncSession,
    spot_id: int,
    name: str,
    suggested_by: int,
    image_url: str = "",
) -> Drink:
    drink = Drink(
        spot_id=spot_id,
        name=name,
        image_url=image_url or "",
        suggested_by=suggested_by,
        votes=0,
        voted_by=[],
    )
    return await _create_item(session, drink, "drinks.create")


async def create_food(
    session: AsyncSession,
    spot_id: int,
    name: str,
    added_by: int,
    image_url: str = "",
) -> Food:
    food = Food(spot_id=spot_id, name=name, image_url=image_url or "", added_by=added_by)
    return await _create_item(session, food, "foods.create")


async def create_cigarette(
    session: AsyncSession,
    spot_id: int,
    image_url: str,
    added_by: int,
    name: str | None = None,
) -> Cigarette:
    cigarette = Cigarette(
        spot_id=spot_id,
        name=name or "Cigarette Pack",
        image_url=image_url,
        added_by=added_by,
    )
    return await _create_item(session, cigarette, "cigarettes.create")


async def delete_item(
    session: AsyncSession,
    model: type[Item],
    item_id: int,
    actor: Profile,
) -> None:
    """Удалить позицию может тот, кто её добавил, или админ."""
    item = await _get_item(session, model, item_id)
    if actor.role != UserRole.admin and _creator_id(item) != actor.id:
        raise PermissionDeniedError("Удалять можно только свои позиции")

    async with write_guard(session, f"{model.__tablename__}.delete"):
        await session.delete(item)
        await session.commit()
    APP_LOGGER.info("[%s.delete] id=%s by=%s", model.__tablename__, item_id, actor.id)


async def delete_drink(session: AsyncSession, drink_id: int, actor: Profile) -> None:
    await delete_item(session, Drink, drink_id, actor)


async def delete_food(session: AsyncSession, food_id: int, actor: Profile) -> None:
    await delete_item(session, Food, food_id, actor)


async def delete_cigarette(session: AsyncSession, cigarette_id: int, actor: Profile) -> None:
    await delete_item(session, Cigarette, cigarette_id, actor)


async def set_item_price(
    session: AsyncSession,
    model: type[Item],
    item_id: int,
    price: Decimal | None,
) -> Item:
    """Цену предложенной позиции выставляет админ."""
    item = await _get_item(session, model, item_id)
    async with write_guard(session, f"{model.__tablename__}.set_price"):
        item.price = price
        session.add(item)
        await session.commit()
    return await reload(session, model, item_id)


async def vote_for_drink(session: AsyncSession, drink_id: int, user_id: int) -> Drink:
    """
    Голос за напиток: повторный вызов тем же пользователем снимает голос.

    Чтение-изменение-запись одной строки, при гонке побеждает последний.
    """
    drink = await _get_item(session, Drink, drink_id)

    voters = VoterSet(drink.voted_by or [])
    added = voters.toggle(user_id)

    async with write_guard(session, "drinks.vote"):
        drink.voted_by = voters.to_list()
        drink.votes = next_vote_count(drink.votes or 0, added)
        session.add(drink)
        await session.commit()

    APP_LOGGER.info(
        "[drinks.vote] drink_id=%s user_id=%s added=%s votes=%s",
        drink_id,
        user_id,
        added,
        drink.votes,
    )
    return await reload(session, Drink, drink_id)
