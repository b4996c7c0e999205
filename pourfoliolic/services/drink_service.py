import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.exceptions import ForbiddenError, NotFoundError
from pourfoliolic.models.drink import Drink

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "date": Drink.date,
    "rating": Drink.rating,
    "name": Drink.name,
    "price": Drink.price,
}

# Columns that may not be cleared by an update
REQUIRED_FIELDS = {"name", "maker", "type", "rating", "is_private"}


@dataclass
class DrinkFilters:
    type: str | None = None
    subtype: str | None = None
    min_rating: float | None = None
    max_rating: float | None = None
    min_price: float | None = None
    max_price: float | None = None
    maker: str | None = None
    search_query: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    user_id: uuid.UUID | None = None
    public_only: bool = False


def _apply_filters(query, filters: DrinkFilters):
    if filters.user_id is not None:
        query = query.where(Drink.user_id == filters.user_id)
    if filters.type:
        query = query.where(Drink.type == filters.type)
    if filters.subtype:
        query = query.where(Drink.subtype == filters.subtype)
    if filters.min_rating is not None:
        query = query.where(Drink.rating >= filters.min_rating)
    if filters.max_rating is not None:
        query = query.where(Drink.rating <= filters.max_rating)
    if filters.min_price is not None:
        query = query.where(Drink.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Drink.price <= filters.max_price)
    if filters.maker:
        query = query.where(Drink.maker.ilike(f"%{filters.maker}%"))
    if filters.search_query:
        pattern = f"%{filters.search_query}%"
        query = query.where(or_(Drink.name.ilike(pattern), Drink.maker.ilike(pattern)))
    if filters.start_date is not None:
        query = query.where(Drink.date >= filters.start_date)
    if filters.end_date is not None:
        query = query.where(Drink.date <= filters.end_date)
    if filters.public_only:
        query = query.where(Drink.is_private == False)  # noqa: E712
    return query


def _apply_sort(query, sort_by: str = "date", sort_order: str = "desc"):
    column = SORT_COLUMNS.get(sort_by, Drink.date)
    if sort_order == "asc":
        return query.order_by(column.asc(), Drink.id.asc())
    return query.order_by(column.desc(), Drink.id.desc())


async def get_drinks(
    db: AsyncSession,
    filters: DrinkFilters | None = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    limit: int | None = None,
) -> list[Drink]:
    query = _apply_filters(select(Drink), filters or DrinkFilters())
    query = _apply_sort(query, sort_by, sort_order)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_public_drinks(
    db: AsyncSession,
    filters: DrinkFilters | None = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    limit: int | None = None,
) -> list[Drink]:
    filters = filters or DrinkFilters()
    filters.public_only = True
    return await get_drinks(db, filters, sort_by, sort_order, limit)


async def create_drink(db: AsyncSession, user_id: uuid.UUID, data: dict) -> Drink:
    drink = Drink(user_id=user_id, **data)
    db.add(drink)
    await db.flush()
    await db.refresh(drink)
    logger.info("User %s logged drink %s", user_id, drink.id)
    return drink


async def get_drink_by_id(db: AsyncSession, drink_id: uuid.UUID) -> Drink | None:
    return await db.get(Drink, drink_id)


async def get_visible_drink(
    db: AsyncSession, drink_id: uuid.UUID, viewer_id: uuid.UUID | None
) -> Drink:
    """A drink the viewer may see: public, or their own. Private drinks look missing to others."""
    drink = await get_drink_by_id(db, drink_id)
    if drink is None or (drink.is_private and drink.user_id != viewer_id):
        raise NotFoundError("Drink")
    return drink


async def _get_owned_drink(db: AsyncSession, user_id: uuid.UUID, drink_id: uuid.UUID) -> Drink:
    drink = await get_drink_by_id(db, drink_id)
    if drink is None:
        raise NotFoundError("Drink")
    if drink.user_id != user_id:
        raise ForbiddenError("You can only modify your own drinks")
    return drink


async def update_drink(
    db: AsyncSession, user_id: uuid.UUID, drink_id: uuid.UUID, data: dict
) -> Drink:
    drink = await _get_owned_drink(db, user_id, drink_id)

    for key, value in data.items():
        if value is None and key in REQUIRED_FIELDS:
            continue
        setattr(drink, key, value)

    await db.flush()
    await db.refresh(drink)
    return drink


async def delete_drink(db: AsyncSession, user_id: uuid.UUID, drink_id: uuid.UUID) -> None:
    drink = await _get_owned_drink(db, user_id, drink_id)
    await db.delete(drink)
    await db.flush()
    logger.info("User %s deleted drink %s", user_id, drink_id)
