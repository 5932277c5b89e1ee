"""Business logic services for Sticker Search."""

from sticker_search.services.context import BotContext
from sticker_search.services.exceptions import (
    AlreadyRegistered,
    DisplayNameMissing,
    InvalidSecret,
    NoTags,
    NotAuthorized,
    NotRegistered,
    ResolutionFailed,
    StickerSearchError,
    StoreUnavailable,
    Untaggable,
)
from sticker_search.services.popularity import PopularityService
from sticker_search.services.resolver import StickerResolver
from sticker_search.services.search import SearchResult, SearchService
from sticker_search.services.tagger_registry import TaggerRegistry
from sticker_search.services.tagging import TaggingService, TagResult

__all__ = [
    # Services
    "BotContext",
    "PopularityService",
    "SearchResult",
    "SearchService",
    "StickerResolver",
    "TaggerRegistry",
    "TaggingService",
    "TagResult",
    # Exceptions
    "StickerSearchError",
    "AlreadyRegistered",
    "DisplayNameMissing",
    "InvalidSecret",
    "NoTags",
    "NotAuthorized",
    "NotRegistered",
    "ResolutionFailed",
    "StoreUnavailable",
    "Untaggable",
]
