"""Tagger model for users requesting or holding tagging permission."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sticker_search.db.base import Base

if TYPE_CHECKING:
    from sticker_search.db.models.tagged_sticker import TaggedSticker


class Tagger(Base):
    """A Telegram user that registered for tagging.

    ``allowed`` starts False and is flipped to True by an admin approval.
    It is never flipped back.
    """

    __tablename__ = "taggers"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Telegram identification
    user_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False)

    # Permission state
    allowed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    tagged_stickers: Mapped[list["TaggedSticker"]] = relationship(
        "TaggedSticker", back_populates="tagger"
    )

    def __repr__(self) -> str:
        return f"<Tagger id={self.id} user_id={self.user_id} username={self.username!r} allowed={self.allowed}>"
