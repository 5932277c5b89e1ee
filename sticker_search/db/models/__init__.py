"""Database models for Sticker Search."""

from sticker_search.db.models.sticker import Sticker
from sticker_search.db.models.tagged_sticker import TaggedSticker
from sticker_search.db.models.tagger import Tagger

__all__ = [
    "Sticker",
    "TaggedSticker",
    "Tagger",
]
