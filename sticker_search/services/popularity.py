"""Popularity feedback from chosen inline results."""

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from sticker_search.core.logging import get_logger
from sticker_search.db.models import Sticker
from sticker_search.services.context import BotContext

logger = get_logger(__name__)

# Sticker.id is a signed 64-bit integer in every supported database
_ID_MIN = -(2**63)
_ID_MAX = 2**63 - 1


class PopularityService:
    """Counts how often each sticker is picked from search results."""

    def __init__(self, ctx: BotContext):
        """Initialize the popularity service.

        Args:
            ctx: Shared bot context.
        """
        self.ctx = ctx

    async def record_selection(self, sticker_id: int) -> None:
        """Increment a sticker's popularity by one.

        The increment is a single ``UPDATE ... SET popularity = popularity + 1``
        so concurrent selections are never lost. Unknown ids and store
        failures are logged and never raised.

        Args:
            sticker_id: Id of the chosen sticker.
        """
        if not _ID_MIN <= sticker_id <= _ID_MAX:
            logger.warning("chosen_sticker_not_found", sticker_id=sticker_id)
            return

        try:
            async with self.ctx.session_maker() as db:
                result = await db.execute(
                    update(Sticker)
                    .where(Sticker.id == sticker_id)
                    .values(popularity=Sticker.popularity + 1)
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("popularity_update_failed", sticker_id=sticker_id, error=str(e))
            return

        if result.rowcount == 0:
            logger.warning("chosen_sticker_not_found", sticker_id=sticker_id)
            return

        logger.debug("sticker_popularity_incremented", sticker_id=sticker_id)
