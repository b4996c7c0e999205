import uuid
from datetime import datetime

from pydantic import BaseModel, Field

USERNAME_PATTERN = r"^[A-Za-z0-9_]{3,20}$"


class UserSummary(BaseModel):
    id: uuid.UUID
    username: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None

    model_config = {"from_attributes": True}


class UserResponse(UserSummary):
    email: str | None
    bio: str | None
    theme: str
    dashboard_json: dict | None = None
    created_at: datetime


class ProfileUpdateRequest(BaseModel):
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=500)
    profile_image_url: str | None = Field(default=None, max_length=1024)


class DashboardWidget(BaseModel):
    id: str = Field(min_length=1, max_length=50)
    visible: bool = True


class PreferencesUpdateRequest(BaseModel):
    theme: str | None = Field(default=None, pattern=r"^(light|dark|system)$")
    dashboard_widgets: list[DashboardWidget] | None = None


class UsernameSetRequest(BaseModel):
    username: str = Field(pattern=USERNAME_PATTERN)


class UsernameAvailability(BaseModel):
    username: str
    available: bool
    reason: str | None = None


class UserCard(UserSummary):
    """A user as shown in search results, suggestions and follower lists."""

    followers_count: int = 0
    following_count: int = 0
    drinks_count: int = 0
    follow_status: str = "none"
