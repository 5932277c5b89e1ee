"""Domain exceptions for tagging, authorization and search."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sticker_search.db.models import Tagger


class StickerSearchError(Exception):
    """Base exception for sticker tagging and search errors."""

    def __init__(self, message: str, code: str = "STICKER_SEARCH_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotAuthorized(StickerSearchError):
    """Raised when the caller is unknown or has not been approved to tag."""

    def __init__(self, message: str = "Caller is not allowed to tag stickers"):
        super().__init__(message, "NOT_AUTHORIZED")


class Untaggable(StickerSearchError):
    """Raised when a sticker does not belong to a sticker set."""

    def __init__(self, message: str = "Sticker is not part of a sticker set"):
        super().__init__(message, "UNTAGGABLE")


class NoTags(StickerSearchError):
    """Raised when a tag request contains no tags."""

    def __init__(self, message: str = "No tags given"):
        super().__init__(message, "NO_TAGS")


class ResolutionFailed(StickerSearchError):
    """Raised when a sticker could neither be inserted nor found."""

    def __init__(self, message: str = "Failed to insert or find the sticker"):
        super().__init__(message, "RESOLUTION_FAILED")


class InvalidSecret(StickerSearchError):
    """Raised when an approval is attempted with the wrong secret."""

    def __init__(self, message: str = "Invalid secret"):
        super().__init__(message, "INVALID_SECRET")


class NotRegistered(StickerSearchError):
    """Raised when approving a username that never registered."""

    def __init__(self, message: str = "User has not registered"):
        super().__init__(message, "NOT_REGISTERED")


class AlreadyRegistered(StickerSearchError):
    """Raised when a user registers twice; carries the existing record."""

    def __init__(self, tagger: Tagger, message: str = "User is already registered"):
        self.tagger = tagger
        super().__init__(message, "ALREADY_REGISTERED")


class DisplayNameMissing(StickerSearchError):
    """Raised when a user without a Telegram username tries to register."""

    def __init__(self, message: str = "A username is required to register"):
        super().__init__(message, "DISPLAY_NAME_MISSING")


class StoreUnavailable(StickerSearchError):
    """Raised for database errors that aren't otherwise classified."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, "STORE_UNAVAILABLE")
