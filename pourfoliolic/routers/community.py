import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.database import get_db
from pourfoliolic.dependencies import get_current_user, get_optional_user
from pourfoliolic.models.user import User
from pourfoliolic.routers.drinks import drink_filters
from pourfoliolic.schemas.drink import CommentResponse, DrinkResponse, FeedDrink
from pourfoliolic.schemas.social import (
    CheerResponse,
    CommentCreate,
    FollowRequestItem,
    FollowResult,
    FollowStatusResponse,
    TrendingFlavor,
    UserProfileResponse,
)
from pourfoliolic.schemas.user import UserCard
from pourfoliolic.services import drink_service, feed_service, social_service
from pourfoliolic.services.drink_service import DrinkFilters

router = APIRouter(prefix="/api/community", tags=["community"])


# --- Feed ---


@router.get("/feed", response_model=list[FeedDrink])
async def get_feed(
    filters: DrinkFilters = Depends(drink_filters),
    sort_by: str = Query(default="date", pattern="^(date|rating|name|price)$"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await feed_service.get_community_feed(
        db, user.id if user else None, filters, sort_by, sort_order
    )


@router.get("/drinks", response_model=list[DrinkResponse])
async def list_public_drinks(
    filters: DrinkFilters = Depends(drink_filters),
    sort_by: str = Query(default="date", pattern="^(date|rating|name|price)$"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
):
    return await drink_service.get_public_drinks(db, filters, sort_by, sort_order)


@router.get("/trending", response_model=list[TrendingFlavor])
async def get_trending(db: AsyncSession = Depends(get_db)):
    return await feed_service.get_trending_flavors(db)


@router.get("/featured", response_model=list[DrinkResponse])
async def get_featured(db: AsyncSession = Depends(get_db)):
    return await feed_service.get_featured_drinks(db)


@router.post("/cheers/{drink_id}", response_model=CheerResponse)
async def toggle_cheer(
    drink_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await feed_service.toggle_cheer(db, user.id, drink_id)


@router.get("/comments/{drink_id}", response_model=list[CommentResponse])
async def list_comments(
    drink_id: uuid.UUID,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    await drink_service.get_visible_drink(db, drink_id, user.id if user else None)
    return await feed_service.get_comments(db, drink_id)


@router.post("/comments/{drink_id}", response_model=CommentResponse, status_code=201)
async def add_comment(
    drink_id: uuid.UUID,
    data: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await feed_service.add_comment(db, user.id, drink_id, data.content)


# --- Follows ---


@router.post("/follow/{user_id}", response_model=FollowResult)
async def follow_user(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await social_service.send_follow_request(db, user.id, user_id)
    return FollowResult(status=result)


@router.delete("/follow/{user_id}", status_code=204)
async def unfollow_user(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await social_service.unfollow_user(db, user.id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not following this user")


@router.get("/follow/{user_id}/status", response_model=FollowStatusResponse)
async def follow_status(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await social_service.get_follow_status(db, user.id, user_id)
    return FollowStatusResponse(user_id=user_id, status=result)


@router.get("/follow-requests", response_model=list[FollowRequestItem])
async def list_follow_requests(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.get_pending_requests(db, user.id)


@router.get("/follow-requests/sent", response_model=list[FollowRequestItem])
async def list_sent_requests(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.get_sent_requests(db, user.id)


@router.post("/follow-requests/{follower_id}/accept")
async def accept_follow_request(
    follower_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await social_service.accept_follow_request(db, user.id, follower_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Follow request not found"
        )
    return {"status": "accepted"}


@router.post("/follow-requests/{follower_id}/decline")
async def decline_follow_request(
    follower_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await social_service.decline_follow_request(db, user.id, follower_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Follow request not found"
        )
    return {"status": "declined"}


@router.get("/followers", response_model=list[UserCard])
async def list_followers(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.get_followers(db, user.id)


@router.delete("/followers/{follower_id}", status_code=204)
async def remove_follower(
    follower_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await social_service.remove_follower(db, user.id, follower_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Follower not found")


@router.get("/following", response_model=list[UserCard])
async def list_following(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.get_following(db, user.id)


# --- Discovery ---


@router.get("/search-users", response_model=list[UserCard])
async def search_users(
    q: str = Query(default="", max_length=100),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.search_users(db, q, user.id if user else None)


@router.get("/suggested-users", response_model=list[UserCard])
async def suggested_users(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.get_suggested_users(db, user.id)


@router.get("/users/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: uuid.UUID,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await social_service.get_user_profile(db, user_id, user.id if user else None)
