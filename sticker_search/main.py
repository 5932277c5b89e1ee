"""Application entry point: Telegram bot plus a FastAPI health endpoint."""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

from fastapi import FastAPI

from sticker_search.api.router import api_router
from sticker_search.core.config import settings
from sticker_search.core.logging import get_logger, setup_logging
from sticker_search.db.session import async_session_maker, engine, init_db
from sticker_search.services import BotContext
from sticker_search.telegram import BotError, BotService
from sticker_search.telegram.handlers import BotHandlers

# Initialize logging
setup_logging()
logger = get_logger(__name__)


async def run_bot(bot: BotService, handlers: BotHandlers) -> None:
    """Start the bot and process updates until it disconnects."""
    try:
        await bot.start(handlers)
        await bot.run_until_disconnected()
    except asyncio.CancelledError:
        raise
    except BotError as e:
        logger.error("bot_failed", code=e.code, error=e.message)
    except Exception as e:
        logger.error("bot_crashed", error=str(e), exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.version,
        host=settings.host,
        port=settings.port,
    )

    await init_db(engine)
    logger.info("database_ready")

    bot_task: asyncio.Task | None = None
    bot = BotService.get_instance()
    if settings.bot_configured:
        ctx = BotContext.from_settings(settings, async_session_maker)
        handlers = BotHandlers(ctx, inline_cache_time=settings.inline_cache_time)
        bot_task = asyncio.create_task(run_bot(bot, handlers))
    else:
        logger.warning(
            "bot_not_configured",
            hint="Set STICKERS_BOT_TOKEN, STICKERS_TELEGRAM_API_ID, STICKERS_TELEGRAM_API_HASH, STICKERS_SECRET",
        )

    yield

    logger.info("shutting_down_application")
    if bot_task is not None:
        await bot.stop()
        bot_task.cancel()
        with suppress(asyncio.CancelledError):
            await bot_task
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Telegram bot for tagging stickers and finding them with inline search",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.include_router(api_router)

    return app


# Create the application instance
app = create_app()


def main() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "sticker_search.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
