"""Tagging service for applying and removing sticker tags."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from sticker_search.core.logging import get_logger
from sticker_search.db.models import TaggedSticker, Tagger
from sticker_search.services.context import BotContext
from sticker_search.services.exceptions import (
    NoTags,
    NotAuthorized,
    StoreUnavailable,
    Untaggable,
)
from sticker_search.services.resolver import StickerResolver
from sticker_search.services.tagger_registry import TaggerRegistry

logger = get_logger(__name__)


def split_tags(text: str | None) -> list[str]:
    """Split free text into tags on any whitespace."""
    if not text:
        return []
    return text.split()


@dataclass
class TagResult:
    """Outcome of a tag request."""

    sticker_id: int
    applied: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed


class TaggingService:
    """Applies and removes tags on behalf of approved taggers."""

    def __init__(
        self,
        ctx: BotContext,
        registry: TaggerRegistry | None = None,
        resolver: StickerResolver | None = None,
    ):
        """Initialize the tagging service.

        Args:
            ctx: Shared bot context.
            registry: Tagger registry; built from ``ctx`` if omitted.
            resolver: Sticker resolver; built from ``ctx`` if omitted.
        """
        self.ctx = ctx
        self.registry = registry or TaggerRegistry(ctx)
        self.resolver = resolver or StickerResolver(ctx)

    async def _require_allowed(self, user_id: int, action: str) -> Tagger:
        tagger = await self.registry.get_tagger(user_id)
        if tagger is None:
            logger.info("unregistered_tagger_rejected", user_id=user_id, action=action)
            raise NotAuthorized()
        if not tagger.allowed:
            logger.info("unapproved_tagger_rejected", username=tagger.username, action=action)
            raise NotAuthorized()
        return tagger

    async def tag(
        self,
        user_id: int,
        file_unique_id: str,
        file_id: str,
        set_name: str | None,
        text: str | None,
    ) -> TagResult:
        """Tag a sticker with every whitespace separated word of ``text``.

        Args:
            user_id: Telegram user id of the tagger.
            file_unique_id: Stable identifier of the sticker file.
            file_id: Reference used to send the sticker back.
            set_name: Sticker set of the sticker.
            text: Free text tags.

        Returns:
            Which tags were applied and which failed to insert.

        Raises:
            NotAuthorized: If the caller isn't an approved tagger.
            Untaggable: If the sticker isn't in a sticker set.
            NoTags: If ``text`` contains no tags.
            ResolutionFailed: If the sticker couldn't be indexed.
            StoreUnavailable: On database errors.
        """
        tagger = await self._require_allowed(user_id, "tag")

        if not set_name:
            logger.info("sticker_without_set_rejected", username=tagger.username, file_unique_id=file_unique_id)
            raise Untaggable()

        tags = split_tags(text)
        if not tags:
            logger.info("tag_without_tags_rejected", username=tagger.username)
            raise NoTags()

        sticker_id = await self.resolver.resolve_or_create(file_unique_id, file_id, set_name)
        result = TagResult(sticker_id=sticker_id)

        try:
            async with self.ctx.session_maker() as db:
                for tag in tags:
                    db.add(
                        TaggedSticker(
                            tag=tag,
                            sticker_id=sticker_id,
                            tagger_id=tagger.id,
                            ts=datetime.now(timezone.utc).replace(tzinfo=None),
                        )
                    )
                    try:
                        await db.commit()
                    except SQLAlchemyError as e:
                        await db.rollback()
                        logger.error(
                            "tag_insert_failed",
                            username=tagger.username,
                            sticker_id=sticker_id,
                            tag=tag,
                            error=str(e),
                        )
                        result.failed.append(tag)
                    else:
                        result.applied.append(tag)
        except SQLAlchemyError as e:
            # Session itself is unusable; everything not yet applied failed
            logger.error("tag_session_failed", sticker_id=sticker_id, error=str(e))
            done = set(result.applied) | set(result.failed)
            result.failed.extend(t for t in tags if t not in done)

        if not result.applied:
            raise StoreUnavailable("None of the tags could be saved")

        logger.info(
            "sticker_tagged",
            username=tagger.username,
            sticker_id=sticker_id,
            file_unique_id=file_unique_id,
            set_name=set_name,
            tags=result.applied,
            failed=result.failed,
        )
        return result

    async def untag(self, user_id: int, file_unique_id: str, text: str | None) -> int:
        """Remove the caller's own tags from a sticker.

        Args:
            user_id: Telegram user id of the tagger.
            file_unique_id: Stable identifier of the sticker file.
            text: Free text tags to remove.

        Returns:
            Number of tag rows deleted. Zero if the sticker was never indexed
            or no tags were given.

        Raises:
            NotAuthorized: If the caller isn't an approved tagger.
            StoreUnavailable: On database errors.
        """
        tagger = await self._require_allowed(user_id, "untag")

        untags = split_tags(text)
        if not untags:
            return 0

        sticker = await self.resolver.find_by_key(file_unique_id)
        if sticker is None:
            logger.info("untag_unindexed_sticker", username=tagger.username, file_unique_id=file_unique_id)
            return 0

        try:
            async with self.ctx.session_maker() as db:
                result = await db.execute(
                    delete(TaggedSticker).where(
                        TaggedSticker.sticker_id == sticker.id,
                        TaggedSticker.tag.in_(untags),
                        TaggedSticker.tagger_id == tagger.id,
                    )
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("untag_failed", sticker_id=sticker.id, error=str(e))
            raise StoreUnavailable() from e

        logger.info(
            "sticker_untagged",
            username=tagger.username,
            sticker_id=sticker.id,
            tags=untags,
            rows=result.rowcount,
        )
        return result.rowcount

    async def list_tags(self, file_unique_id: str) -> list[str]:
        """Get every tag on a sticker, from all taggers, oldest first.

        Returns an empty list for stickers that were never indexed.

        Raises:
            StoreUnavailable: On database errors.
        """
        sticker = await self.resolver.find_by_key(file_unique_id)
        if sticker is None:
            return []

        try:
            async with self.ctx.session_maker() as db:
                result = await db.execute(
                    select(TaggedSticker.tag)
                    .where(TaggedSticker.sticker_id == sticker.id)
                    .order_by(TaggedSticker.id)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("list_tags_failed", sticker_id=sticker.id, error=str(e))
            raise StoreUnavailable() from e
