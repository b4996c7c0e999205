import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.exceptions import ForbiddenError, NotFoundError
from pourfoliolic.models.circle import Circle
from pourfoliolic.models.circle_invite import CircleInvite
from pourfoliolic.models.circle_member import CircleMember
from pourfoliolic.models.circle_post import CirclePost
from pourfoliolic.models.user import User
from pourfoliolic.services.drink_service import get_visible_drink

logger = logging.getLogger(__name__)


async def _get_circle(db: AsyncSession, circle_id: uuid.UUID) -> Circle:
    circle = await db.get(Circle, circle_id)
    if circle is None:
        raise NotFoundError("Circle")
    return circle


async def _get_membership(
    db: AsyncSession, circle_id: uuid.UUID, user_id: uuid.UUID
) -> CircleMember | None:
    result = await db.execute(
        select(CircleMember).where(
            CircleMember.circle_id == circle_id,
            CircleMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def _require_member(
    db: AsyncSession, circle_id: uuid.UUID, user_id: uuid.UUID
) -> CircleMember:
    membership = await _get_membership(db, circle_id, user_id)
    if membership is None:
        raise ForbiddenError("Not a member of this circle")
    return membership


async def _require_admin(
    db: AsyncSession, circle_id: uuid.UUID, user_id: uuid.UUID
) -> CircleMember:
    membership = await _require_member(db, circle_id, user_id)
    if membership.role != "admin":
        raise ForbiddenError("Only circle admins can do that")
    return membership


async def _member_count(db: AsyncSession, circle_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(CircleMember.id)).where(CircleMember.circle_id == circle_id)
    )
    return result.scalar_one()


async def _circle_dict(db: AsyncSession, circle: Circle) -> dict:
    return {
        "id": circle.id,
        "name": circle.name,
        "description": circle.description,
        "is_private": circle.is_private,
        "created_by": circle.created_by,
        "created_at": circle.created_at,
        "member_count": await _member_count(db, circle.id),
    }


async def create_circle(
    db: AsyncSession,
    user_id: uuid.UUID,
    name: str,
    description: str | None = None,
    is_private: bool = True,
) -> dict:
    name = name.strip()
    if not name:
        raise ValueError("Circle name cannot be empty")

    circle = Circle(name=name, description=description, is_private=is_private, created_by=user_id)
    db.add(circle)
    await db.flush()

    db.add(CircleMember(circle_id=circle.id, user_id=user_id, role="admin"))
    await db.flush()
    await db.refresh(circle)

    logger.info("User %s created circle %s", user_id, circle.id)
    return await _circle_dict(db, circle)


async def get_user_circles(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    result = await db.execute(
        select(Circle)
        .join(CircleMember, CircleMember.circle_id == Circle.id)
        .where(CircleMember.user_id == user_id)
        .order_by(Circle.created_at.desc())
    )
    return [await _circle_dict(db, c) for c in result.scalars().all()]


async def get_public_circles(db: AsyncSession, limit: int = 50) -> list[dict]:
    result = await db.execute(
        select(Circle)
        .where(Circle.is_private == False)  # noqa: E712
        .order_by(Circle.created_at.desc())
        .limit(limit)
    )
    return [await _circle_dict(db, c) for c in result.scalars().all()]


async def get_circle_detail(
    db: AsyncSession, circle_id: uuid.UUID, viewer_id: uuid.UUID
) -> dict:
    """Circle with its members. Private circles are hidden from non-members."""
    circle = await _get_circle(db, circle_id)
    if circle.is_private and await _get_membership(db, circle_id, viewer_id) is None:
        raise NotFoundError("Circle")

    result = await db.execute(
        select(CircleMember, User)
        .join(User, User.id == CircleMember.user_id)
        .where(CircleMember.circle_id == circle_id)
        .order_by(CircleMember.joined_at.asc())
    )
    detail = await _circle_dict(db, circle)
    detail["members"] = [
        {"user": user, "role": member.role, "joined_at": member.joined_at}
        for member, user in result.all()
    ]
    return detail


async def join_circle(db: AsyncSession, user_id: uuid.UUID, circle_id: uuid.UUID) -> None:
    circle = await _get_circle(db, circle_id)
    if circle.is_private:
        raise ForbiddenError("This circle is invite-only")
    if await _get_membership(db, circle_id, user_id) is not None:
        raise ValueError("Already a member of this circle")

    db.add(CircleMember(circle_id=circle_id, user_id=user_id, role="member"))
    await db.flush()


async def invite_to_circle(
    db: AsyncSession, inviter_id: uuid.UUID, circle_id: uuid.UUID, invitee_id: uuid.UUID
) -> CircleInvite:
    await _get_circle(db, circle_id)
    await _require_admin(db, circle_id, inviter_id)

    if await db.get(User, invitee_id) is None:
        raise NotFoundError("User")
    if await _get_membership(db, circle_id, invitee_id) is not None:
        raise ValueError("User is already a member of this circle")

    result = await db.execute(
        select(CircleInvite).where(
            CircleInvite.circle_id == circle_id,
            CircleInvite.invitee_id == invitee_id,
        )
    )
    invite = result.scalar_one_or_none()
    if invite is not None and invite.status == "pending":
        raise ValueError("User has already been invited")

    if invite is None:
        invite = CircleInvite(circle_id=circle_id, inviter_id=inviter_id, invitee_id=invitee_id)
        db.add(invite)
    else:
        # A declined invite can be re-sent
        invite.inviter_id = inviter_id
        invite.status = "pending"
    await db.flush()
    await db.refresh(invite)
    return invite


async def get_pending_invites(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    result = await db.execute(
        select(CircleInvite, Circle, User)
        .join(Circle, Circle.id == CircleInvite.circle_id)
        .outerjoin(User, User.id == CircleInvite.inviter_id)
        .where(CircleInvite.invitee_id == user_id, CircleInvite.status == "pending")
        .order_by(CircleInvite.created_at.desc())
    )
    return [
        {
            "id": invite.id,
            "circle_id": circle.id,
            "circle_name": circle.name,
            "inviter": inviter,
            "status": invite.status,
            "created_at": invite.created_at,
        }
        for invite, circle, inviter in result.all()
    ]


async def _get_own_pending_invite(
    db: AsyncSession, user_id: uuid.UUID, invite_id: uuid.UUID
) -> CircleInvite:
    invite = await db.get(CircleInvite, invite_id)
    if invite is None or invite.invitee_id != user_id or invite.status != "pending":
        raise NotFoundError("Invite")
    return invite


async def respond_to_invite(
    db: AsyncSession, user_id: uuid.UUID, invite_id: uuid.UUID, accept: bool
) -> str:
    invite = await _get_own_pending_invite(db, user_id, invite_id)
    invite.status = "accepted" if accept else "declined"
    if accept and await _get_membership(db, invite.circle_id, user_id) is None:
        db.add(CircleMember(circle_id=invite.circle_id, user_id=user_id, role="member"))
    await db.flush()
    return invite.status


async def leave_circle(db: AsyncSession, user_id: uuid.UUID, circle_id: uuid.UUID) -> None:
    """Leave a circle. A last admin hands over to the longest-standing member,
    and an empty circle is deleted."""
    circle = await _get_circle(db, circle_id)
    membership = await _require_member(db, circle_id, user_id)
    was_admin = membership.role == "admin"

    await db.delete(membership)
    await db.flush()

    result = await db.execute(
        select(CircleMember)
        .where(CircleMember.circle_id == circle_id)
        .order_by(CircleMember.joined_at.asc())
    )
    remaining = list(result.scalars().all())

    if not remaining:
        await db.delete(circle)
        await db.flush()
        logger.info("Circle %s deleted after last member left", circle_id)
        return

    if was_admin and not any(m.role == "admin" for m in remaining):
        remaining[0].role = "admin"
        await db.flush()
        logger.info("User %s promoted to admin of circle %s", remaining[0].user_id, circle_id)


async def remove_member(
    db: AsyncSession, admin_id: uuid.UUID, circle_id: uuid.UUID, member_id: uuid.UUID
) -> None:
    await _get_circle(db, circle_id)
    await _require_admin(db, circle_id, admin_id)
    if admin_id == member_id:
        raise ValueError("Use leave to remove yourself")

    membership = await _get_membership(db, circle_id, member_id)
    if membership is None:
        raise NotFoundError("Member")
    await db.delete(membership)
    await db.flush()


async def create_post(
    db: AsyncSession,
    user_id: uuid.UUID,
    circle_id: uuid.UUID,
    content: str,
    drink_id: uuid.UUID | None = None,
) -> dict:
    await _get_circle(db, circle_id)
    await _require_member(db, circle_id, user_id)

    content = content.strip()
    if not content:
        raise ValueError("Post cannot be empty")
    if drink_id is not None:
        await get_visible_drink(db, drink_id, user_id)

    post = CirclePost(circle_id=circle_id, user_id=user_id, content=content, drink_id=drink_id)
    db.add(post)
    await db.flush()
    return {
        "id": post.id,
        "circle_id": post.circle_id,
        "user": await db.get(User, user_id),
        "content": post.content,
        "drink_id": post.drink_id,
        "created_at": post.created_at,
    }


async def get_posts(
    db: AsyncSession, viewer_id: uuid.UUID, circle_id: uuid.UUID, limit: int = 50
) -> list[dict]:
    circle = await _get_circle(db, circle_id)
    if circle.is_private:
        await _require_member(db, circle_id, viewer_id)

    result = await db.execute(
        select(CirclePost, User)
        .outerjoin(User, User.id == CirclePost.user_id)
        .where(CirclePost.circle_id == circle_id)
        .order_by(CirclePost.created_at.desc())
        .limit(limit)
    )
    return [
        {
            "id": post.id,
            "circle_id": post.circle_id,
            "user": author,
            "content": post.content,
            "drink_id": post.drink_id,
            "created_at": post.created_at,
        }
        for post, author in result.all()
    ]
