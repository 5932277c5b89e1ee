"""Application configuration using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STICKERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Sticker Search"
    version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Health endpoint server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, description="Health endpoint port")

    config_path: Path = Field(
        default=Path("./config"),
        description="Path for the bot session file and SQLite database",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./config/stickers.db",
        description="Database connection URL (sqlite+aiosqlite or postgresql+asyncpg)",
    )

    # Telegram bot (api id/hash from https://my.telegram.org, token from @BotFather)
    bot_token: str | None = Field(
        default=None,
        description="Bot token issued by @BotFather",
    )
    telegram_api_id: int | None = Field(
        default=None,
        description="Telegram API ID from my.telegram.org",
    )
    telegram_api_hash: str | None = Field(
        default=None,
        description="Telegram API Hash from my.telegram.org",
    )

    # Administration
    secret: str | None = Field(
        default=None,
        description="Shared secret required by /allow to approve taggers",
    )

    # Search
    query_result_max: int = Field(
        default=50,
        ge=1,
        le=50,
        description="Maximum inline results per query (Telegram caps this at 50)",
    )
    inline_cache_time: int = Field(
        default=0,
        ge=0,
        description="Seconds Telegram may cache an inline answer",
    )

    @property
    def bot_session_path(self) -> Path:
        """Get the Telethon session file path."""
        return self.config_path / "bot.session"

    @property
    def bot_configured(self) -> bool:
        """Check if everything needed to run the bot is configured."""
        return (
            self.bot_token is not None
            and self.telegram_api_id is not None
            and self.telegram_api_hash is not None
            and bool(self.secret)
        )


# Global settings instance
settings = Settings()
