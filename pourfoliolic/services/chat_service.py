import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.exceptions import ForbiddenError, NotFoundError
from pourfoliolic.models.conversation import (
    Conversation,
    ConversationParticipant,
    pair_key,
)
from pourfoliolic.models.message import Message
from pourfoliolic.models.user import User
from pourfoliolic.services.social_service import are_mutual_followers

logger = logging.getLogger(__name__)

MESSAGE_LIMIT = 50
MAX_MESSAGE_LENGTH = 2000


async def _get_by_pair(db: AsyncSession, key: str) -> Conversation | None:
    result = await db.execute(select(Conversation).where(Conversation.pair_key == key))
    return result.scalar_one_or_none()


async def _get_participant(
    db: AsyncSession, conversation_id: uuid.UUID, user_id: uuid.UUID
) -> ConversationParticipant | None:
    result = await db.execute(
        select(ConversationParticipant).where(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def _require_participant(
    db: AsyncSession, conversation_id: uuid.UUID, user_id: uuid.UUID
) -> ConversationParticipant:
    if await db.get(Conversation, conversation_id) is None:
        raise NotFoundError("Conversation")
    participant = await _get_participant(db, conversation_id, user_id)
    if participant is None:
        raise ForbiddenError("Not a participant in this conversation")
    return participant


async def get_or_create_conversation(
    db: AsyncSession, user_id: uuid.UUID, other_id: uuid.UUID
) -> Conversation:
    """Return the pair's conversation, creating it on first contact.

    Only mutual followers may chat. Two requests racing to create the same
    conversation both end up with the row that won the pair_key constraint.
    """
    if user_id == other_id:
        raise ValueError("Cannot start a conversation with yourself")
    if await db.get(User, other_id) is None:
        raise NotFoundError("User")
    if not await are_mutual_followers(db, user_id, other_id):
        raise ForbiddenError("You can only message mutual followers")

    key = pair_key(user_id, other_id)
    existing = await _get_by_pair(db, key)
    if existing is not None:
        return existing

    now = datetime.now(timezone.utc)
    try:
        async with db.begin_nested():
            conversation = Conversation(pair_key=key, created_at=now, last_message_at=now)
            conversation.participants = [
                ConversationParticipant(user_id=user_id, last_read_at=now),
                ConversationParticipant(user_id=other_id, last_read_at=now),
            ]
            db.add(conversation)
            await db.flush()
    except IntegrityError:
        logger.info("Conversation %s created concurrently, reusing it", key)
        existing = await _get_by_pair(db, key)
        if existing is None:
            raise
        return existing

    logger.info("Conversation %s started by %s", conversation.id, user_id)
    return conversation


async def _unread_count(
    db: AsyncSession, conversation_id: uuid.UUID, user_id: uuid.UUID, last_read_at: datetime
) -> int:
    result = await db.execute(
        select(func.count(Message.id)).where(
            Message.conversation_id == conversation_id,
            Message.sender_id != user_id,
            Message.created_at >= last_read_at,
        )
    )
    return result.scalar_one()


async def get_conversations(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    """The user's conversations, most recently active first, with read receipts."""
    result = await db.execute(
        select(Conversation, ConversationParticipant)
        .join(
            ConversationParticipant,
            ConversationParticipant.conversation_id == Conversation.id,
        )
        .where(ConversationParticipant.user_id == user_id)
        .order_by(Conversation.last_message_at.desc())
    )

    conversations = []
    for conversation, own in result.all():
        other_result = await db.execute(
            select(ConversationParticipant, User)
            .join(User, User.id == ConversationParticipant.user_id)
            .where(
                ConversationParticipant.conversation_id == conversation.id,
                ConversationParticipant.user_id != user_id,
            )
        )
        other = other_result.first()

        last_result = await db.execute(
            select(Message)
            .where(Message.conversation_id == conversation.id)
            .order_by(Message.created_at.desc())
            .limit(1)
        )

        conversations.append({
            "id": conversation.id,
            "created_at": conversation.created_at,
            "last_message_at": conversation.last_message_at,
            "other_user": other[1] if other else None,
            "other_user_last_read_at": other[0].last_read_at if other else None,
            "last_message": last_result.scalar_one_or_none(),
            "unread_count": await _unread_count(db, conversation.id, user_id, own.last_read_at),
        })
    return conversations


async def get_messages(
    db: AsyncSession,
    user_id: uuid.UUID,
    conversation_id: uuid.UUID,
    limit: int = MESSAGE_LIMIT,
) -> list[Message]:
    await _require_participant(db, conversation_id, user_id)
    result = await db.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def send_message(
    db: AsyncSession, user_id: uuid.UUID, conversation_id: uuid.UUID, content: str
) -> Message:
    content = content.strip()
    if not content:
        raise ValueError("Message cannot be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValueError(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")

    participant = await _require_participant(db, conversation_id, user_id)
    conversation = await db.get(Conversation, conversation_id)

    now = datetime.now(timezone.utc)
    message = Message(
        conversation_id=conversation_id,
        sender_id=user_id,
        content=content,
        created_at=now,
    )
    db.add(message)
    conversation.last_message_at = now
    participant.last_read_at = now
    await db.flush()
    await db.refresh(message)
    return message


async def mark_conversation_read(
    db: AsyncSession, user_id: uuid.UUID, conversation_id: uuid.UUID
) -> datetime:
    participant = await _require_participant(db, conversation_id, user_id)
    participant.last_read_at = datetime.now(timezone.utc)
    await db.flush()
    return participant.last_read_at


async def get_total_unread(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(ConversationParticipant).where(ConversationParticipant.user_id == user_id)
    )
    total = 0
    for participant in result.scalars().all():
        total += await _unread_count(
            db, participant.conversation_id, user_id, participant.last_read_at
        )
    return total
