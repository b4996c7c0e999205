import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from pourfoliolic.models.base import Base


class Cheer(Base):
    __tablename__ = "cheers"

    drink_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("drinks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("drink_id", "user_id", name="uq_cheers_pair"),
    )
