"""Telegram bot service managing the Telethon client."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from telethon import TelegramClient
from telethon.errors import FloodWaitError

from sticker_search.core.config import settings
from sticker_search.core.logging import get_logger
from sticker_search.telegram.exceptions import (
    BotNotConfiguredError,
    BotNotConnectedError,
    BotRateLimitError,
)

if TYPE_CHECKING:
    from sticker_search.telegram.handlers import BotHandlers

logger = get_logger(__name__)


class BotService:
    """Singleton service managing the Telethon bot client.

    Usage:
        bot = BotService.get_instance()
        await bot.start(handlers)
        await bot.run_until_disconnected()
    """

    _instance: BotService | None = None
    _lock: asyncio.Lock = asyncio.Lock()

    def __init__(self) -> None:
        """Initialize the bot service.

        Note: Use BotService.get_instance() instead of direct instantiation.
        """
        self._client: TelegramClient | None = None
        self._connected: bool = False
        self._username: str | None = None

    @classmethod
    def get_instance(cls) -> BotService:
        """Get the singleton instance of BotService."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        cls._instance = None

    def _ensure_configured(self) -> None:
        """Ensure bot credentials are configured.

        Raises:
            BotNotConfiguredError: If credentials are not set.
        """
        if not settings.bot_configured:
            raise BotNotConfiguredError(
                "Telegram bot not configured. Set STICKERS_BOT_TOKEN, "
                "STICKERS_TELEGRAM_API_ID, STICKERS_TELEGRAM_API_HASH and STICKERS_SECRET."
            )

    def _get_client(self) -> TelegramClient:
        """Get or create the Telethon client."""
        self._ensure_configured()

        if self._client is None:
            settings.config_path.mkdir(parents=True, exist_ok=True)
            session_path = str(settings.bot_session_path)
            self._client = TelegramClient(
                session_path,
                settings.telegram_api_id,
                settings.telegram_api_hash,
            )
            logger.info("bot_client_created", session_path=session_path)

        return self._client

    async def start(self, handlers: BotHandlers) -> None:
        """Log in with the bot token and attach the update handlers.

        Args:
            handlers: Handlers to register on the client.

        Raises:
            BotNotConfiguredError: If credentials are not set.
            BotRateLimitError: If Telegram rate limits the login.
        """
        async with self._lock:
            client = self._get_client()

            try:
                await client.start(bot_token=settings.bot_token)
            except FloodWaitError as e:
                logger.warning("bot_rate_limited", retry_after=e.seconds)
                raise BotRateLimitError(e.seconds)

            me = await client.get_me()
            self._username = me.username if me else None
            self._connected = True

            handlers.bot_username = self._username
            handlers.register(client)

            logger.info("bot_started", username=self._username)

    async def run_until_disconnected(self) -> None:
        """Process updates until the client disconnects.

        Raises:
            BotNotConnectedError: If :meth:`start` hasn't been called.
        """
        client = self.client
        try:
            await client.run_until_disconnected()
        finally:
            self._connected = False

    async def stop(self) -> None:
        """Disconnect the client."""
        async with self._lock:
            if self._client is not None:
                try:
                    await self._client.disconnect()
                except Exception as e:
                    logger.warning("bot_disconnect_error", error=str(e))
                finally:
                    self._connected = False
                    logger.info("bot_disconnected")

    def is_connected(self) -> bool:
        """Check if the client is connected."""
        return self._connected and self._client is not None and self._client.is_connected()

    @property
    def username(self) -> str | None:
        """The bot's username, known once started."""
        return self._username

    @property
    def client(self) -> TelegramClient:
        """Get the underlying Telethon client.

        Raises:
            BotNotConnectedError: If the client is not connected.
        """
        if not self._connected or self._client is None:
            raise BotNotConnectedError()
        return self._client


def get_bot_service() -> BotService:
    """Get the BotService singleton instance."""
    return BotService.get_instance()
