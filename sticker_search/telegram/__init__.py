"""Telegram bot adapter built on Telethon."""

from sticker_search.telegram.exceptions import (
    BotError,
    BotNotConfiguredError,
    BotNotConnectedError,
    BotRateLimitError,
)
from sticker_search.telegram.service import BotService, get_bot_service

__all__ = [
    # Service
    "BotService",
    "get_bot_service",
    # Exceptions
    "BotError",
    "BotNotConfiguredError",
    "BotNotConnectedError",
    "BotRateLimitError",
]
