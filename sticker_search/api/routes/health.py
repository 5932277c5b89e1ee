"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_search.core.config import settings
from sticker_search.core.logging import get_logger
from sticker_search.db import get_db
from sticker_search.schemas.health import HealthResponse
from sticker_search.telegram import BotService

router = APIRouter(tags=["health"])

logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Check application health.

    Returns:
        Overall status, version, and database and bot connectivity.
    """
    database = "connected"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("health_database_unreachable", error=str(e))
        database = "disconnected"

    bot = "connected" if BotService.get_instance().is_connected() else "disconnected"

    return HealthResponse(
        status="ok" if database == "connected" and bot == "connected" else "degraded",
        version=settings.version,
        database=database,
        bot=bot,
    )
