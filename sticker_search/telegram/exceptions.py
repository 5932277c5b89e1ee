"""Custom exceptions for the Telegram bot adapter."""

from __future__ import annotations


class BotError(Exception):
    """Base exception for Telegram bot errors."""

    def __init__(self, message: str, code: str = "BOT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class BotNotConfiguredError(BotError):
    """Raised when the bot token, API credentials or admin secret are missing."""

    def __init__(self, message: str = "Telegram bot is not configured"):
        super().__init__(message, "NOT_CONFIGURED")


class BotNotConnectedError(BotError):
    """Raised when attempting to use the bot without an active connection."""

    def __init__(self, message: str = "Telegram bot is not connected"):
        super().__init__(message, "NOT_CONNECTED")


class BotRateLimitError(BotError):
    """Raised when Telegram asks the bot to wait before logging in again."""

    def __init__(self, retry_after: int, message: str | None = None):
        self.retry_after = retry_after
        msg = message or f"Rate limited by Telegram. Retry after {retry_after} seconds"
        super().__init__(msg, "RATE_LIMITED")
