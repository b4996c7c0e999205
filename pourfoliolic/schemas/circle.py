import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pourfoliolic.schemas.user import UserSummary


class CircleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    is_private: bool = True


class CircleResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    is_private: bool
    created_by: uuid.UUID
    created_at: datetime
    member_count: int = 0


class CircleMemberResponse(BaseModel):
    user: UserSummary
    role: str
    joined_at: datetime


class CircleDetail(CircleResponse):
    members: list[CircleMemberResponse] = []


class CircleInviteRequest(BaseModel):
    user_id: uuid.UUID


class CircleInviteResponse(BaseModel):
    id: uuid.UUID
    circle_id: uuid.UUID
    circle_name: str
    inviter: UserSummary | None
    status: str
    created_at: datetime


class CirclePostCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)
    drink_id: uuid.UUID | None = None


class CirclePostResponse(BaseModel):
    id: uuid.UUID
    circle_id: uuid.UUID
    user: UserSummary | None
    content: str
    drink_id: uuid.UUID | None
    created_at: datetime
