import logging
import uuid
from collections import Counter

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.config import settings
from pourfoliolic.models.cheer import Cheer
from pourfoliolic.models.comment import Comment
from pourfoliolic.models.drink import Drink
from pourfoliolic.models.user import User
from pourfoliolic.services.drink_service import (
    DrinkFilters,
    get_public_drinks,
    get_visible_drink,
)
from pourfoliolic.services.notification_service import notify_cheer, notify_comment

logger = logging.getLogger(__name__)

TRENDING_LIMIT = 10
FEATURED_LIMIT = 6


async def get_cheers_count(db: AsyncSession, drink_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Cheer.id)).where(Cheer.drink_id == drink_id)
    )
    return result.scalar_one()


async def has_cheered(db: AsyncSession, user_id: uuid.UUID, drink_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(Cheer.id).where(Cheer.drink_id == drink_id, Cheer.user_id == user_id)
    )
    return result.scalar_one_or_none() is not None


async def get_comments(db: AsyncSession, drink_id: uuid.UUID) -> list[dict]:
    """Comments on a drink, oldest first, each with its author."""
    result = await db.execute(
        select(Comment, User)
        .outerjoin(User, User.id == Comment.user_id)
        .where(Comment.drink_id == drink_id)
        .order_by(Comment.created_at.asc())
    )
    return [
        {
            "id": comment.id,
            "drink_id": comment.drink_id,
            "content": comment.content,
            "created_at": comment.created_at,
            "user": author,
        }
        for comment, author in result.all()
    ]


async def _feed_row(db: AsyncSession, drink: Drink, viewer_id: uuid.UUID | None) -> dict:
    owner = await db.get(User, drink.user_id)
    row = {column.key: getattr(drink, column.key) for column in Drink.__table__.columns}
    row["user"] = owner
    row["cheers_count"] = await get_cheers_count(db, drink.id)
    row["has_cheered"] = (
        await has_cheered(db, viewer_id, drink.id) if viewer_id else False
    )
    row["comments"] = await get_comments(db, drink.id)
    return row


async def get_community_feed(
    db: AsyncSession,
    viewer_id: uuid.UUID | None = None,
    filters: DrinkFilters | None = None,
    sort_by: str = "date",
    sort_order: str = "desc",
) -> list[dict]:
    """Latest public drinks with their owner, cheers and comments attached."""
    drinks = await get_public_drinks(
        db, filters, sort_by, sort_order, limit=settings.FEED_LIMIT
    )
    return [await _feed_row(db, drink, viewer_id) for drink in drinks]


async def toggle_cheer(db: AsyncSession, user_id: uuid.UUID, drink_id: uuid.UUID) -> dict:
    drink = await get_visible_drink(db, drink_id, user_id)

    result = await db.execute(
        delete(Cheer).where(Cheer.drink_id == drink_id, Cheer.user_id == user_id)
    )
    cheered = result.rowcount == 0
    if cheered:
        db.add(Cheer(drink_id=drink_id, user_id=user_id))
        await db.flush()
        await notify_cheer(db, user_id, drink.user_id, drink_id)

    return {
        "drink_id": drink_id,
        "cheered": cheered,
        "cheers_count": await get_cheers_count(db, drink_id),
    }


async def add_comment(
    db: AsyncSession, user_id: uuid.UUID, drink_id: uuid.UUID, content: str
) -> dict:
    content = content.strip()
    if not content:
        raise ValueError("Comment cannot be empty")
    if len(content) > 1000:
        raise ValueError("Comment must be at most 1000 characters")

    drink = await get_visible_drink(db, drink_id, user_id)

    comment = Comment(drink_id=drink_id, user_id=user_id, content=content)
    db.add(comment)
    await db.flush()
    await notify_comment(db, user_id, drink.user_id, drink_id)

    logger.info("User %s commented on drink %s", user_id, drink_id)
    return {
        "id": comment.id,
        "drink_id": comment.drink_id,
        "content": comment.content,
        "created_at": comment.created_at,
        "user": await db.get(User, user_id),
    }


async def get_trending_flavors(db: AsyncSession, limit: int = TRENDING_LIMIT) -> list[dict]:
    """Most common nose and palate descriptors across public drinks."""
    result = await db.execute(
        select(Drink.nose, Drink.palate).where(Drink.is_private == False)  # noqa: E712
    )
    counts = Counter()
    for nose, palate in result.all():
        for descriptor in (nose or []) + (palate or []):
            flavor = descriptor.strip().lower()
            if flavor:
                counts[flavor] += 1
    return [{"flavor": flavor, "count": count} for flavor, count in counts.most_common(limit)]


async def get_featured_drinks(db: AsyncSession, limit: int = FEATURED_LIMIT) -> list[Drink]:
    result = await db.execute(
        select(Drink)
        .where(Drink.is_private == False)  # noqa: E712
        .order_by(Drink.rating.desc(), Drink.date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
