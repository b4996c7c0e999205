import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from pourfoliolic.schemas.user import UserSummary

DrinkType = Literal["wine", "beer", "spirit", "cocktail"]


class DrinkCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    maker: str = Field(min_length=1, max_length=255)
    type: DrinkType
    subtype: str | None = Field(default=None, max_length=100)
    rating: float = Field(ge=0, le=5)
    image_url: str | None = Field(default=None, max_length=1024)
    nose: list[str] = []
    palate: list[str] = []
    finish: str | None = None
    price: float | None = Field(default=None, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    location: str | None = Field(default=None, max_length=255)
    pairings: list[str] = []
    occasion: str | None = Field(default=None, max_length=255)
    mood: str | None = Field(default=None, max_length=255)
    is_private: bool = False

    @field_validator("rating")
    @classmethod
    def round_rating(cls, v: float) -> float:
        return round(v, 1)


class DrinkUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    maker: str | None = Field(default=None, min_length=1, max_length=255)
    type: DrinkType | None = None
    subtype: str | None = Field(default=None, max_length=100)
    rating: float | None = Field(default=None, ge=0, le=5)
    image_url: str | None = Field(default=None, max_length=1024)
    nose: list[str] | None = None
    palate: list[str] | None = None
    finish: str | None = None
    price: float | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    location: str | None = Field(default=None, max_length=255)
    pairings: list[str] | None = None
    occasion: str | None = Field(default=None, max_length=255)
    mood: str | None = Field(default=None, max_length=255)
    is_private: bool | None = None

    @field_validator("rating")
    @classmethod
    def round_rating(cls, v: float | None) -> float | None:
        return round(v, 1) if v is not None else v


class DrinkResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    maker: str
    type: str
    subtype: str | None
    rating: float
    date: datetime
    image_url: str | None
    nose: list[str] | None
    palate: list[str] | None
    finish: str | None
    price: float | None
    currency: str | None
    location: str | None
    pairings: list[str] | None
    occasion: str | None
    mood: str | None
    is_private: bool

    model_config = {"from_attributes": True}


class CommentResponse(BaseModel):
    id: uuid.UUID
    drink_id: uuid.UUID
    content: str
    created_at: datetime
    user: UserSummary | None


class FeedDrink(DrinkResponse):
    user: UserSummary | None = None
    cheers_count: int = 0
    has_cheered: bool = False
    comments: list[CommentResponse] = []
