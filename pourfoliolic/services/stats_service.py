import logging
import uuid
from collections import Counter

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.models.drink import Drink

logger = logging.getLogger(__name__)

RECOMMENDATION_LIMIT = 5
# Ratings at or above this mark a type or maker as a favorite
LIKED_RATING = 4


async def get_drink_stats(db: AsyncSession, user_id: uuid.UUID) -> dict:
    result = await db.execute(
        select(Drink).where(Drink.user_id == user_id).order_by(Drink.date.asc(), Drink.id.asc())
    )
    drinks = result.scalars().all()

    if not drinks:
        return {
            "total_drinks": 0,
            "average_rating": 0,
            "total_spending": 0,
            "favorite_type": None,
            "drinks_by_type": {},
        }

    # Counter keeps insertion order, so most_common breaks ties by first seen
    by_type = Counter(d.type for d in drinks)
    total_rating = sum(d.rating or 0 for d in drinks)

    return {
        "total_drinks": len(drinks),
        "average_rating": round(total_rating / len(drinks), 2),
        "total_spending": round(sum(d.price for d in drinks if d.price is not None), 2),
        "favorite_type": by_type.most_common(1)[0][0],
        "drinks_by_type": dict(by_type),
    }


async def _top_rated_public(
    db: AsyncSession, user_id: uuid.UUID, limit: int
) -> list[Drink]:
    result = await db.execute(
        select(Drink)
        .where(Drink.is_private == False, Drink.user_id != user_id)  # noqa: E712
        .order_by(Drink.rating.desc(), Drink.date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_recommendations(
    db: AsyncSession, user_id: uuid.UUID, limit: int = RECOMMENDATION_LIMIT
) -> list[Drink]:
    """Public drinks from other users matching the types and makers this user rates highly.

    Type matches come first, then maker matches, each pass capped at limit.
    """
    result = await db.execute(select(Drink.type, Drink.maker, Drink.rating).where(Drink.user_id == user_id))
    own = result.all()

    liked_types = {row.type for row in own if row.rating >= LIKED_RATING}
    liked_makers = {row.maker for row in own if row.rating >= LIKED_RATING}

    if not liked_types and not liked_makers:
        return await _top_rated_public(db, user_id, limit)

    base = select(Drink).where(
        Drink.is_private == False,  # noqa: E712
        Drink.user_id != user_id,
    )
    by_type = await db.execute(
        base.where(Drink.type.in_(liked_types))
        .order_by(Drink.rating.desc(), Drink.date.desc())
        .limit(limit)
    )
    by_maker = await db.execute(
        base.where(Drink.maker.in_(liked_makers))
        .order_by(Drink.rating.desc(), Drink.date.desc())
        .limit(limit)
    )

    seen = set()
    recommendations = []
    for drink in list(by_type.scalars().all()) + list(by_maker.scalars().all()):
        if drink.id in seen:
            continue
        seen.add(drink.id)
        recommendations.append(drink)

    logger.debug("%d recommendations for user %s", len(recommendations), user_id)
    return recommendations
