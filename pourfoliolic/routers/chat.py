import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.database import get_db
from pourfoliolic.dependencies import get_current_user
from pourfoliolic.models.user import User
from pourfoliolic.schemas.chat import (
    ConversationCreate,
    ConversationResponse,
    ConversationSummary,
    MessageCreate,
    MessageResponse,
)
from pourfoliolic.schemas.notification import UnreadCountResponse
from pourfoliolic.schemas.user import UserSummary
from pourfoliolic.services import chat_service, social_service

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/connections", response_model=list[UserSummary])
async def list_connections(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Mutual followers the user can message."""
    return await social_service.get_connections(db, user.id)


@router.get("/conversations", response_model=list[ConversationSummary])
async def list_conversations(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await chat_service.get_conversations(db, user.id)


@router.post("/conversations", response_model=ConversationResponse)
async def open_conversation(
    data: ConversationCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await chat_service.get_or_create_conversation(db, user.id, data.other_user_id)


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: uuid.UUID,
    limit: int = Query(default=50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await chat_service.get_messages(db, user.id, conversation_id, limit=limit)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
async def send_message(
    conversation_id: uuid.UUID,
    data: MessageCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await chat_service.send_message(db, user.id, conversation_id, data.content)


@router.post("/conversations/{conversation_id}/read")
async def mark_read(
    conversation_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    last_read_at = await chat_service.mark_conversation_read(db, user.id, conversation_id)
    return {"status": "read", "last_read_at": last_read_at}


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return UnreadCountResponse(count=await chat_service.get_total_unread(db, user.id))
