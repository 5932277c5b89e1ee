"""Search service ranking stickers by matched tags and popularity.

Matching is a substring test (SQL ``LIKE '%token%'``). Case sensitivity is
whatever the database's ``LIKE`` does: case-insensitive for ASCII on SQLite,
case-sensitive on PostgreSQL.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from sticker_search.core.logging import get_logger
from sticker_search.db.models import Sticker, TaggedSticker
from sticker_search.services.context import BotContext
from sticker_search.services.exceptions import StoreUnavailable

logger = get_logger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """A ranked search hit.

    ``sticker_id`` is sent to Telegram as the inline result id and comes
    back in the chosen-result update.
    """

    sticker_id: int
    file_id: str


class SearchService:
    """Answers free text queries against sticker tags."""

    def __init__(self, ctx: BotContext):
        """Initialize the search service.

        Args:
            ctx: Shared bot context.
        """
        self.ctx = ctx

    async def search(self, query: str | None, limit: int | None = None) -> list[SearchResult]:
        """Find stickers whose tags contain the query words.

        Stickers are ranked by how many distinct query words matched one of
        their tags, then by popularity. Order among stickers equal on both
        is stable but unspecified.

        Args:
            query: Free text query.
            limit: Maximum results; defaults to the context's ``max_results``.

        Returns:
            Ranked results, possibly empty.

        Raises:
            StoreUnavailable: On database errors.
        """
        if query is None or not query.strip():
            return []

        tokens = list(dict.fromkeys(query.split()))
        limit = self.ctx.max_results if limit is None else limit

        try:
            async with self.ctx.session_maker() as db:
                matched_tokens: dict[int, set[str]] = {}
                for token in tokens:
                    result = await db.execute(
                        select(TaggedSticker.sticker_id)
                        .where(TaggedSticker.tag.contains(token, autoescape=True))
                        .distinct()
                    )
                    for sticker_id in result.scalars():
                        matched_tokens.setdefault(sticker_id, set()).add(token)

                if not matched_tokens:
                    return []

                result = await db.execute(
                    select(Sticker.id, Sticker.file_id)
                    .where(Sticker.id.in_(list(matched_tokens)))
                    .order_by(Sticker.popularity.desc())
                )
                rows = list(result.all())
        except SQLAlchemyError as e:
            logger.error("sticker_search_failed", query=query, error=str(e))
            raise StoreUnavailable() from e

        # Stable sort keeps the popularity order within equal match counts
        rows.sort(key=lambda row: len(matched_tokens[row.id]), reverse=True)

        return [SearchResult(sticker_id=row.id, file_id=row.file_id) for row in rows[:limit]]
