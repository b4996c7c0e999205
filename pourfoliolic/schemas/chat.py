import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pourfoliolic.schemas.user import UserSummary


class ConversationCreate(BaseModel):
    other_user_id: uuid.UUID


class MessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class MessageResponse(BaseModel):
    id: uuid.UUID
    conversation_id: uuid.UUID
    sender_id: uuid.UUID
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ConversationResponse(BaseModel):
    id: uuid.UUID
    created_at: datetime
    last_message_at: datetime

    model_config = {"from_attributes": True}


class ConversationSummary(ConversationResponse):
    other_user: UserSummary | None
    last_message: MessageResponse | None = None
    unread_count: int = 0
    other_user_last_read_at: datetime | None = None
