import logging
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.models.notification import NOTIFICATION_TYPES, Notification
from pourfoliolic.models.user import User

logger = logging.getLogger(__name__)


async def create_notification(
    db: AsyncSession,
    user_id: uuid.UUID,
    notification_type: str,
    actor_id: uuid.UUID,
    drink_id: uuid.UUID | None = None,
) -> Notification | None:
    """Insert one notification row. Users are never notified about their own actions."""
    if notification_type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type '{notification_type}'")
    if user_id == actor_id:
        return None

    notification = Notification(
        user_id=user_id,
        type=notification_type,
        actor_id=actor_id,
        drink_id=drink_id,
        read=False,
    )
    db.add(notification)
    await db.flush()
    logger.debug("Notification %s -> %s (%s)", actor_id, user_id, notification_type)
    return notification


async def notify_follow_request(db: AsyncSession, follower_id: uuid.UUID, target_id: uuid.UUID):
    return await create_notification(db, target_id, "follow_request", follower_id)


async def notify_follow_accepted(db: AsyncSession, user_id: uuid.UUID, follower_id: uuid.UUID):
    return await create_notification(db, follower_id, "follow_accepted", user_id)


async def notify_comment(
    db: AsyncSession, commenter_id: uuid.UUID, owner_id: uuid.UUID, drink_id: uuid.UUID
):
    return await create_notification(db, owner_id, "comment", commenter_id, drink_id)


async def notify_cheer(
    db: AsyncSession, cheerer_id: uuid.UUID, owner_id: uuid.UUID, drink_id: uuid.UUID
):
    return await create_notification(db, owner_id, "cheer", cheerer_id, drink_id)


async def get_notifications(
    db: AsyncSession,
    user_id: uuid.UUID,
    unread_only: bool = False,
    limit: int = 50,
) -> list[dict]:
    query = select(Notification, User).outerjoin(User, User.id == Notification.actor_id).where(
        Notification.user_id == user_id
    )
    if unread_only:
        query = query.where(Notification.read == False)  # noqa: E712
    query = query.order_by(Notification.created_at.desc()).limit(limit)
    result = await db.execute(query)

    return [
        {
            "id": notification.id,
            "type": notification.type,
            "actor": actor,
            "drink_id": notification.drink_id,
            "read": notification.read,
            "created_at": notification.created_at,
        }
        for notification, actor in result.all()
    ]


async def get_unread_count(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        )
    )
    return result.scalar_one()


async def mark_read(db: AsyncSession, user_id: uuid.UUID, notification_id: uuid.UUID) -> bool:
    result = await db.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(read=True)
    )
    return result.rowcount > 0


async def mark_all_read(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        update(Notification)
        .where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        )
        .values(read=True)
    )
    return result.rowcount
