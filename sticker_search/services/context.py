"""Process-wide dependencies handed to every service."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sticker_search.core.config import Settings

# Telegram rejects inline answers with more than 50 results
QUERY_RESULT_MAX = 50


@dataclass(frozen=True)
class BotContext:
    """Store handle and admin configuration shared by all request handlers.

    Built once at startup; services never read global settings themselves.
    """

    session_maker: async_sessionmaker[AsyncSession]
    secret: str
    max_results: int = QUERY_RESULT_MAX

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_maker: async_sessionmaker[AsyncSession],
    ) -> BotContext:
        """Build a context from application settings.

        Raises:
            ValueError: If no admin secret is configured.
        """
        if not settings.secret:
            raise ValueError("STICKERS_SECRET must be set")
        return cls(
            session_maker=session_maker,
            secret=settings.secret,
            max_results=settings.query_result_max,
        )
