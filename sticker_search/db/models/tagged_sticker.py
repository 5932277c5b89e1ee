"""TaggedSticker model for sticker-tag associations."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sticker_search.db.base import Base

if TYPE_CHECKING:
    from sticker_search.db.models.sticker import Sticker
    from sticker_search.db.models.tagger import Tagger


class TaggedSticker(Base):
    """One tag applied to one sticker by one tagger.

    The same (sticker, tag, tagger) combination may appear more than once.
    """

    __tablename__ = "tagged_stickers"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Tag data
    tag: Mapped[str] = mapped_column(Text, nullable=False)
    sticker_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stickers.id"), nullable=False
    )
    tagger_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("taggers.id"), nullable=False
    )

    # Timestamps
    ts: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    sticker: Mapped["Sticker"] = relationship("Sticker", back_populates="tags")
    tagger: Mapped["Tagger"] = relationship("Tagger", back_populates="tagged_stickers")

    # Indexes
    __table_args__ = (
        Index("ix_tagged_stickers_sticker_id", "sticker_id"),
        Index("ix_tagged_stickers_tagger_id", "tagger_id"),
    )
