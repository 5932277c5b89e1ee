"""Sticker model: one row per distinct Telegram sticker that has been tagged."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sticker_search.db.base import Base

if TYPE_CHECKING:
    from sticker_search.db.models.tagged_sticker import TaggedSticker


class Sticker(Base):
    """An indexed sticker and its popularity counter."""

    __tablename__ = "stickers"

    # Primary key; doubles as the inline result id sent to Telegram
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Telegram identification
    file_unique_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    file_id: Mapped[str] = mapped_column(Text, nullable=False)
    set_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Incremented each time the sticker is picked from an inline result
    popularity: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    tags: Mapped[list["TaggedSticker"]] = relationship(
        "TaggedSticker", back_populates="sticker"
    )

    def __repr__(self) -> str:
        return f"<Sticker id={self.id} file_unique_id={self.file_unique_id!r} popularity={self.popularity}>"
