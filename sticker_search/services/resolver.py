"""Sticker resolver: maps Telegram file unique ids to indexed stickers."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from sticker_search.core.logging import get_logger
from sticker_search.db.models import Sticker
from sticker_search.services.context import BotContext
from sticker_search.services.exceptions import ResolutionFailed, StoreUnavailable

logger = get_logger(__name__)


class StickerResolver:
    """Finds or creates the single Sticker row for a file unique id."""

    def __init__(self, ctx: BotContext):
        """Initialize the resolver.

        Args:
            ctx: Shared bot context.
        """
        self.ctx = ctx

    async def find_by_key(self, file_unique_id: str) -> Sticker | None:
        """Look up an indexed sticker without creating it.

        Raises:
            StoreUnavailable: On database errors.
        """
        try:
            async with self.ctx.session_maker() as db:
                result = await db.execute(
                    select(Sticker).where(Sticker.file_unique_id == file_unique_id)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("sticker_lookup_failed", file_unique_id=file_unique_id, error=str(e))
            raise StoreUnavailable() from e

    async def resolve_or_create(
        self,
        file_unique_id: str,
        file_id: str,
        set_name: str,
    ) -> int:
        """Return the id of the sticker for ``file_unique_id``, indexing it if new.

        The insert is attempted first. A unique constraint violation means
        another request (or an earlier tag) already indexed the sticker, so
        the existing row is selected instead. Concurrent callers for the
        same key therefore all get the same id.

        Args:
            file_unique_id: Stable Telegram identifier for the sticker file.
            file_id: Reference used to send the sticker back.
            set_name: Sticker set the sticker belongs to.

        Returns:
            The sticker id.

        Raises:
            ResolutionFailed: If the insert conflicted but no row was found.
            StoreUnavailable: On any other database error.
        """
        try:
            async with self.ctx.session_maker() as db:
                sticker = Sticker(
                    file_unique_id=file_unique_id,
                    file_id=file_id,
                    set_name=set_name,
                    popularity=0,
                )
                db.add(sticker)
                try:
                    await db.commit()
                except IntegrityError as e:
                    await db.rollback()
                    logger.debug(
                        "sticker_insert_conflict",
                        file_unique_id=file_unique_id,
                        error=str(e.orig),
                    )
                else:
                    logger.info(
                        "sticker_indexed",
                        sticker_id=sticker.id,
                        file_unique_id=file_unique_id,
                        set_name=set_name,
                    )
                    return sticker.id

                result = await db.execute(
                    select(Sticker.id).where(Sticker.file_unique_id == file_unique_id)
                )
                sticker_id = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("sticker_resolve_failed", file_unique_id=file_unique_id, error=str(e))
            raise StoreUnavailable() from e

        if sticker_id is None:
            logger.error("sticker_resolution_failed", file_unique_id=file_unique_id)
            raise ResolutionFailed()

        return sticker_id
