import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pourfoliolic.schemas.drink import DrinkResponse
from pourfoliolic.schemas.user import UserSummary


class FollowResult(BaseModel):
    status: str  # pending, already_pending, already_following


class FollowStatusResponse(BaseModel):
    user_id: uuid.UUID
    status: str  # none, pending, accepted


class FollowRequestItem(BaseModel):
    id: uuid.UUID
    user: UserSummary
    status: str
    created_at: datetime


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)


class CheerResponse(BaseModel):
    drink_id: uuid.UUID
    cheered: bool
    cheers_count: int


class TrendingFlavor(BaseModel):
    flavor: str
    count: int


class UserProfileResponse(UserSummary):
    bio: str | None = None
    followers_count: int
    following_count: int
    drinks_count: int
    follow_status: str
    drinks: list[DrinkResponse] = []
