import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pourfoliolic.models.base import Base


class Circle(Base):
    __tablename__ = "circles"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    members: Mapped[list["CircleMember"]] = relationship(back_populates="circle", cascade="all, delete-orphan")  # noqa: F821
    invites: Mapped[list["CircleInvite"]] = relationship(cascade="all, delete-orphan")  # noqa: F821
    posts: Mapped[list["CirclePost"]] = relationship(cascade="all, delete-orphan")  # noqa: F821
