import logging
import uuid

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.exceptions import NotFoundError
from pourfoliolic.models.drink import Drink
from pourfoliolic.models.follow import Follow
from pourfoliolic.models.user import User
from pourfoliolic.services.notification_service import (
    notify_follow_accepted,
    notify_follow_request,
)

logger = logging.getLogger(__name__)


async def _get_edge(
    db: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> Follow | None:
    result = await db.execute(
        select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.scalar_one_or_none()


async def send_follow_request(
    db: AsyncSession, follower_id: uuid.UUID, target_id: uuid.UUID
) -> str:
    """Request to follow a user. An existing edge is reported, never duplicated."""
    if follower_id == target_id:
        raise ValueError("Cannot follow yourself")

    target = await db.get(User, target_id)
    if target is None:
        raise NotFoundError("User")

    existing = await _get_edge(db, follower_id, target_id)
    if existing is not None:
        return "already_following" if existing.status == "accepted" else "already_pending"

    db.add(Follow(follower_id=follower_id, following_id=target_id, status="pending"))
    await db.flush()

    await notify_follow_request(db, follower_id, target_id)
    logger.info("Follow request %s -> %s", follower_id, target_id)
    return "pending"


async def accept_follow_request(
    db: AsyncSession, user_id: uuid.UUID, follower_id: uuid.UUID
) -> bool:
    """Accept a pending request addressed to user_id. False when nothing matched."""
    edge = await _get_edge(db, follower_id, user_id)
    if edge is None or edge.status != "pending":
        return False

    edge.status = "accepted"
    await db.flush()

    await notify_follow_accepted(db, user_id, follower_id)
    return True


async def decline_follow_request(
    db: AsyncSession, user_id: uuid.UUID, follower_id: uuid.UUID
) -> bool:
    result = await db.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == user_id,
            Follow.status == "pending",
        )
    )
    return result.rowcount > 0


async def unfollow_user(
    db: AsyncSession, follower_id: uuid.UUID, target_id: uuid.UUID
) -> bool:
    """Drop the follower -> target edge, pending or accepted."""
    result = await db.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == target_id,
        )
    )
    return result.rowcount > 0


async def remove_follower(
    db: AsyncSession, user_id: uuid.UUID, follower_id: uuid.UUID
) -> bool:
    return await unfollow_user(db, follower_id, user_id)


async def get_follow_status(
    db: AsyncSession, follower_id: uuid.UUID, target_id: uuid.UUID
) -> str:
    edge = await _get_edge(db, follower_id, target_id)
    return edge.status if edge else "none"


async def are_mutual_followers(
    db: AsyncSession, user_a: uuid.UUID, user_b: uuid.UUID
) -> bool:
    result = await db.execute(
        select(func.count(Follow.id)).where(
            Follow.status == "accepted",
            or_(
                and_(Follow.follower_id == user_a, Follow.following_id == user_b),
                and_(Follow.follower_id == user_b, Follow.following_id == user_a),
            ),
        )
    )
    return result.scalar_one() == 2


async def get_follower_ids(db: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    result = await db.execute(
        select(Follow.follower_id).where(
            Follow.following_id == user_id, Follow.status == "accepted"
        )
    )
    return [row[0] for row in result.all()]


async def get_following_ids(db: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    result = await db.execute(
        select(Follow.following_id).where(
            Follow.follower_id == user_id, Follow.status == "accepted"
        )
    )
    return [row[0] for row in result.all()]


async def get_mutual_ids(db: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    following = set(await get_following_ids(db, user_id))
    return [fid for fid in await get_follower_ids(db, user_id) if fid in following]


async def _user_counts(db: AsyncSession, user_id: uuid.UUID, public_only: bool = True) -> dict:
    followers = await db.execute(
        select(func.count(Follow.id)).where(
            Follow.following_id == user_id, Follow.status == "accepted"
        )
    )
    following = await db.execute(
        select(func.count(Follow.id)).where(
            Follow.follower_id == user_id, Follow.status == "accepted"
        )
    )
    drinks_query = select(func.count(Drink.id)).where(Drink.user_id == user_id)
    if public_only:
        drinks_query = drinks_query.where(Drink.is_private == False)  # noqa: E712
    drinks = await db.execute(drinks_query)
    return {
        "followers_count": followers.scalar_one(),
        "following_count": following.scalar_one(),
        "drinks_count": drinks.scalar_one(),
    }


async def build_user_card(
    db: AsyncSession, user: User, viewer_id: uuid.UUID | None = None
) -> dict:
    card = {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "profile_image_url": user.profile_image_url,
    }
    card.update(await _user_counts(db, user.id))
    card["follow_status"] = (
        await get_follow_status(db, viewer_id, user.id) if viewer_id else "none"
    )
    return card


async def _cards_for_ids(
    db: AsyncSession, user_ids: list[uuid.UUID], viewer_id: uuid.UUID | None
) -> list[dict]:
    if not user_ids:
        return []
    result = await db.execute(
        select(User).where(User.id.in_(user_ids)).order_by(User.created_at.desc())
    )
    return [await build_user_card(db, u, viewer_id) for u in result.scalars().all()]


async def get_followers(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    return await _cards_for_ids(db, await get_follower_ids(db, user_id), user_id)


async def get_following(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    return await _cards_for_ids(db, await get_following_ids(db, user_id), user_id)


async def get_connections(db: AsyncSession, user_id: uuid.UUID) -> list[User]:
    """Mutual followers, the only users a chat can be opened with."""
    mutual_ids = await get_mutual_ids(db, user_id)
    if not mutual_ids:
        return []
    result = await db.execute(select(User).where(User.id.in_(mutual_ids)))
    return list(result.scalars().all())


async def get_pending_requests(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    """Incoming follow requests awaiting this user's decision, newest first."""
    result = await db.execute(
        select(Follow, User)
        .join(User, User.id == Follow.follower_id)
        .where(Follow.following_id == user_id, Follow.status == "pending")
        .order_by(Follow.created_at.desc())
    )
    return [
        {"id": edge.id, "user": requester, "status": edge.status, "created_at": edge.created_at}
        for edge, requester in result.all()
    ]


async def get_sent_requests(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    result = await db.execute(
        select(Follow, User)
        .join(User, User.id == Follow.following_id)
        .where(Follow.follower_id == user_id, Follow.status == "pending")
        .order_by(Follow.created_at.desc())
    )
    return [
        {"id": edge.id, "user": target, "status": edge.status, "created_at": edge.created_at}
        for edge, target in result.all()
    ]


async def search_users(
    db: AsyncSession, query: str, viewer_id: uuid.UUID | None = None, limit: int = 20
) -> list[dict]:
    query = query.strip()
    if not query:
        return []
    pattern = f"%{query}%"
    stmt = select(User).where(
        or_(
            User.username.ilike(pattern),
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
        )
    )
    if viewer_id is not None:
        stmt = stmt.where(User.id != viewer_id)
    result = await db.execute(stmt.order_by(User.username.asc()).limit(limit))
    return [await build_user_card(db, u, viewer_id) for u in result.scalars().all()]


async def get_suggested_users(
    db: AsyncSession, viewer_id: uuid.UUID, limit: int = 10
) -> list[dict]:
    """Users the viewer has no edge to yet, most public drinks first."""
    already = select(Follow.following_id).where(Follow.follower_id == viewer_id)
    public_drinks = func.count(Drink.id)
    result = await db.execute(
        select(User, public_drinks.label("drink_count"))
        .outerjoin(
            Drink,
            and_(Drink.user_id == User.id, Drink.is_private == False),  # noqa: E712
        )
        .where(User.id != viewer_id, User.id.not_in(already))
        .group_by(User.id)
        .order_by(public_drinks.desc(), User.created_at.desc())
        .limit(limit)
    )
    return [await build_user_card(db, row[0], viewer_id) for row in result.all()]


async def get_user_profile(
    db: AsyncSession, target_id: uuid.UUID, viewer_id: uuid.UUID | None = None
) -> dict:
    """Public profile. Private drinks are visible to the owner and accepted followers."""
    target = await db.get(User, target_id)
    if target is None:
        raise NotFoundError("User")

    profile = await build_user_card(db, target, viewer_id)
    profile["bio"] = target.bio

    is_owner = viewer_id == target_id
    can_see_private = is_owner or profile["follow_status"] == "accepted"

    query = select(Drink).where(Drink.user_id == target_id)
    if not can_see_private:
        query = query.where(Drink.is_private == False)  # noqa: E712
    result = await db.execute(query.order_by(Drink.date.desc()))
    profile["drinks"] = list(result.scalars().all())
    if can_see_private:
        profile["drinks_count"] = len(profile["drinks"])
    return profile
