import uuid
from datetime import datetime

from pydantic import BaseModel

from pourfoliolic.schemas.user import UserSummary


class NotificationResponse(BaseModel):
    id: uuid.UUID
    type: str
    actor: UserSummary | None
    drink_id: uuid.UUID | None
    read: bool
    created_at: datetime


class UnreadCountResponse(BaseModel):
    count: int
