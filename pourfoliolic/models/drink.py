import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pourfoliolic.models.base import Base

DRINK_TYPES = ("wine", "beer", "spirit", "cocktail")


class Drink(Base):
    __tablename__ = "drinks"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    maker: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # wine, beer, spirit, cocktail
    subtype: Mapped[str | None] = mapped_column(String(100))
    rating: Mapped[float] = mapped_column(Numeric(2, 1, asdecimal=False), nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    image_url: Mapped[str | None] = mapped_column(String(1024))
    nose: Mapped[list[str] | None] = mapped_column(JSON, default=list)
    palate: Mapped[list[str] | None] = mapped_column(JSON, default=list)
    finish: Mapped[str | None] = mapped_column(Text)
    price: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    currency: Mapped[str | None] = mapped_column(String(3), default="USD")
    location: Mapped[str | None] = mapped_column(String(255))
    pairings: Mapped[list[str] | None] = mapped_column(JSON, default=list)
    occasion: Mapped[str | None] = mapped_column(String(255))
    mood: Mapped[str | None] = mapped_column(String(255))
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="drinks")  # noqa: F821
