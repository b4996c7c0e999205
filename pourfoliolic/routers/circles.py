import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.database import get_db
from pourfoliolic.dependencies import get_current_user
from pourfoliolic.models.user import User
from pourfoliolic.schemas.circle import (
    CircleCreate,
    CircleDetail,
    CircleInviteRequest,
    CircleInviteResponse,
    CirclePostCreate,
    CirclePostResponse,
    CircleResponse,
)
from pourfoliolic.services import circle_service

router = APIRouter(prefix="/api/circles", tags=["circles"])


@router.post("", response_model=CircleResponse, status_code=201)
async def create_circle(
    data: CircleCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await circle_service.create_circle(
        db, user.id, data.name, data.description, data.is_private
    )


@router.get("", response_model=list[CircleResponse])
async def list_my_circles(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await circle_service.get_user_circles(db, user.id)


@router.get("/public", response_model=list[CircleResponse])
async def list_public_circles(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await circle_service.get_public_circles(db)


@router.get("/invites", response_model=list[CircleInviteResponse])
async def list_invites(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await circle_service.get_pending_invites(db, user.id)


@router.post("/invites/{invite_id}/accept")
async def accept_invite(
    invite_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"status": await circle_service.respond_to_invite(db, user.id, invite_id, accept=True)}


@router.post("/invites/{invite_id}/decline")
async def decline_invite(
    invite_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"status": await circle_service.respond_to_invite(db, user.id, invite_id, accept=False)}


@router.get("/{circle_id}", response_model=CircleDetail)
async def get_circle(
    circle_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await circle_service.get_circle_detail(db, circle_id, user.id)


@router.post("/{circle_id}/join")
async def join_circle(
    circle_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await circle_service.join_circle(db, user.id, circle_id)
    return {"status": "joined"}


@router.post("/{circle_id}/invite", status_code=201)
async def invite_member(
    circle_id: uuid.UUID,
    data: CircleInviteRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invite = await circle_service.invite_to_circle(db, user.id, circle_id, data.user_id)
    return {"id": invite.id, "status": invite.status}


@router.post("/{circle_id}/leave")
async def leave_circle(
    circle_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await circle_service.leave_circle(db, user.id, circle_id)
    return {"status": "left"}


@router.delete("/{circle_id}/members/{member_id}", status_code=204)
async def remove_member(
    circle_id: uuid.UUID,
    member_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await circle_service.remove_member(db, user.id, circle_id, member_id)


@router.get("/{circle_id}/posts", response_model=list[CirclePostResponse])
async def list_posts(
    circle_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await circle_service.get_posts(db, user.id, circle_id)


@router.post("/{circle_id}/posts", response_model=CirclePostResponse, status_code=201)
async def create_post(
    circle_id: uuid.UUID,
    data: CirclePostCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await circle_service.create_post(db, user.id, circle_id, data.content, data.drink_id)
