import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.database import get_db
from pourfoliolic.dependencies import get_current_user
from pourfoliolic.models.comment import Comment
from pourfoliolic.models.drink import Drink
from pourfoliolic.models.follow import Follow
from pourfoliolic.models.user import User
from pourfoliolic.schemas.user import (
    PreferencesUpdateRequest,
    ProfileUpdateRequest,
    UserResponse,
    UsernameAvailability,
    UsernameSetRequest,
)
from pourfoliolic.services import auth_service

router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/auth/user", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """Return the currently authenticated user."""
    return user


@router.patch("/auth/user", response_model=UserResponse)
async def update_me(
    data: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await auth_service.update_profile(db, user.id, data.model_dump(exclude_unset=True))


@router.patch("/auth/preferences", response_model=UserResponse)
async def update_preferences(
    data: PreferencesUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    widgets = (
        [w.model_dump() for w in data.dashboard_widgets]
        if data.dashboard_widgets is not None
        else None
    )
    return await auth_service.update_preferences(db, user.id, data.theme, widgets)


@router.get("/auth/account/export")
async def export_account(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Export everything the user has logged as JSON."""
    drinks = (await db.execute(
        select(Drink).where(Drink.user_id == user.id)
    )).scalars().all()

    comments = (await db.execute(
        select(Comment).where(Comment.user_id == user.id)
    )).scalars().all()

    follows = (await db.execute(
        select(Follow).where(Follow.follower_id == user.id)
    )).scalars().all()

    def serialize(obj):
        d = {c.name: getattr(obj, c.name) for c in obj.__table__.columns}
        for k, v in d.items():
            if hasattr(v, "isoformat"):
                d[k] = v.isoformat()
            elif isinstance(v, uuid.UUID):
                d[k] = str(v)
        return d

    return {
        "user": serialize(await auth_service.get_user(db, user.id)),
        "drinks": [serialize(d) for d in drinks],
        "comments": [serialize(c) for c in comments],
        "following": [serialize(f) for f in follows],
    }


@router.delete("/auth/account", status_code=204)
async def delete_account(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete the account and everything that belongs to it."""
    await auth_service.delete_account(db, user.id)


@router.get("/username/check/{username}", response_model=UsernameAvailability)
async def check_username(
    username: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    available, reason = await auth_service.check_username(db, username, user.id)
    return UsernameAvailability(username=username, available=available, reason=reason)


@router.post("/username/set", response_model=UserResponse)
async def set_username(
    data: UsernameSetRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await auth_service.set_username(db, user.id, data.username)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
