"""Tests for the TaggingService."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from sticker_search.db.models import Sticker, TaggedSticker
from sticker_search.services import (
    NoTags,
    NotAuthorized,
    SearchService,
    StoreUnavailable,
    TaggingService,
    Untaggable,
)
from sticker_search.services.tagging import split_tags


@pytest.fixture
def tagging(ctx) -> TaggingService:
    return TaggingService(ctx)


async def count_rows(session_maker, model) -> int:
    async with session_maker() as db:
        result = await db.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def tags_by_tagger(session_maker, tagger_id: int) -> list[str]:
    async with session_maker() as db:
        result = await db.execute(
            select(TaggedSticker.tag)
            .where(TaggedSticker.tagger_id == tagger_id)
            .order_by(TaggedSticker.id)
        )
        return list(result.scalars().all())


class TestSplitTags:
    """Tests for tag text splitting."""

    def test_splits_on_any_whitespace(self):
        assert split_tags("  cute\tcat \n blue ") == ["cute", "cat", "blue"]

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t"])
    def test_empty_text(self, text):
        assert split_tags(text) == []


class TestTagPreconditions:
    """Tests for authorization and input checks, in order."""

    @pytest.mark.asyncio
    async def test_unregistered_caller_is_rejected(self, tagging, session_maker):
        with pytest.raises(NotAuthorized):
            await tagging.tag(100, "uniq-1", "file-1", "cats", "cute")

        assert await count_rows(session_maker, Sticker) == 0

    @pytest.mark.asyncio
    async def test_unapproved_caller_is_rejected(self, tagging, make_tagger, session_maker):
        await make_tagger(100, "alice", allowed=False)

        with pytest.raises(NotAuthorized) as exc_info:
            await tagging.tag(100, "uniq-1", "file-1", "cats", "cute")

        assert exc_info.value.code == "NOT_AUTHORIZED"
        assert await count_rows(session_maker, TaggedSticker) == 0

    @pytest.mark.asyncio
    async def test_authorization_is_checked_before_sticker_set(self, tagging, make_tagger):
        await make_tagger(100, "alice", allowed=False)

        with pytest.raises(NotAuthorized):
            await tagging.tag(100, "uniq-1", "file-1", None, "")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("set_name", [None, ""])
    async def test_sticker_without_set_is_untaggable(self, tagging, make_tagger, session_maker, set_name):
        await make_tagger(100, "alice")

        with pytest.raises(Untaggable):
            await tagging.tag(100, "uniq-1", "file-1", set_name, "cute")

        assert await count_rows(session_maker, TaggedSticker) == 0
        assert await count_rows(session_maker, Sticker) == 0

    @pytest.mark.asyncio
    async def test_sticker_set_is_checked_before_tags(self, tagging, make_tagger):
        await make_tagger(100, "alice")

        with pytest.raises(Untaggable):
            await tagging.tag(100, "uniq-1", "file-1", None, "   ")

    @pytest.mark.asyncio
    async def test_empty_tags_are_rejected(self, tagging, make_tagger, session_maker):
        await make_tagger(100, "alice")

        with pytest.raises(NoTags):
            await tagging.tag(100, "uniq-1", "file-1", "cats", "  \n ")

        assert await count_rows(session_maker, Sticker) == 0


class TestTag:
    """Tests for applying tags."""

    @pytest.mark.asyncio
    async def test_tag_inserts_one_row_per_word(self, tagging, make_tagger, session_maker):
        tagger = await make_tagger(100, "alice")

        result = await tagging.tag(100, "uniq-1", "file-1", "cats", "cute  blue\ncat")

        assert result.applied == ["cute", "blue", "cat"]
        assert result.failed == []
        assert result.complete is True
        assert await tags_by_tagger(session_maker, tagger.id) == ["cute", "blue", "cat"]

        async with session_maker() as db:
            rows = (await db.execute(select(TaggedSticker))).scalars().all()
        assert {row.sticker_id for row in rows} == {result.sticker_id}
        assert all(row.ts is not None for row in rows)

    @pytest.mark.asyncio
    async def test_tagging_twice_reuses_sticker_and_keeps_duplicates(self, tagging, make_tagger, session_maker):
        tagger = await make_tagger(100, "alice")

        first = await tagging.tag(100, "uniq-1", "file-1", "cats", "cute")
        second = await tagging.tag(100, "uniq-1", "file-1", "cats", "cute")

        assert first.sticker_id == second.sticker_id
        assert await count_rows(session_maker, Sticker) == 1
        assert await tags_by_tagger(session_maker, tagger.id) == ["cute", "cute"]

    @pytest.mark.asyncio
    async def test_tag_reports_failed_inserts(self, ctx, make_tagger):
        """Tags that fail to insert are reported back, not dropped."""
        await make_tagger(100, "alice")
        tagging = TaggingService(ctx)
        tagging.resolver.resolve_or_create = AsyncMock(return_value=1)

        real_session_maker = ctx.session_maker
        calls = {"n": 0}

        class FlakySession:
            def __init__(self):
                self._cm = real_session_maker()

            async def __aenter__(self):
                self.db = await self._cm.__aenter__()
                real_commit = self.db.commit

                async def commit():
                    calls["n"] += 1
                    if calls["n"] == 2:
                        await self.db.flush()
                        raise OperationalError("INSERT", {}, Exception("disk I/O error"))
                    await real_commit()

                self.db.commit = commit
                return self.db

            async def __aexit__(self, *exc):
                return await self._cm.__aexit__(*exc)

        tagging.ctx = type(ctx)(session_maker=FlakySession, secret=ctx.secret)

        result = await tagging.tag(100, "uniq-1", "file-1", "cats", "cute blue cat")

        assert result.applied == ["cute", "cat"]
        assert result.failed == ["blue"]
        assert result.complete is False

    @pytest.mark.asyncio
    async def test_tag_raises_when_nothing_was_saved(self, ctx, make_tagger):
        await make_tagger(100, "alice")
        tagging = TaggingService(ctx)
        tagging.resolver.resolve_or_create = AsyncMock(return_value=1)

        def broken_session_maker():
            raise OperationalError("INSERT", {}, Exception("db gone"))

        tagging.ctx = type(ctx)(session_maker=broken_session_maker, secret=ctx.secret)

        with pytest.raises(StoreUnavailable):
            await tagging.tag(100, "uniq-1", "file-1", "cats", "cute")


class TestUntag:
    """Tests for removing tags."""

    @pytest.mark.asyncio
    async def test_untag_removes_only_callers_tags(self, tagging, make_tagger, session_maker):
        alice = await make_tagger(100, "alice")
        bob = await make_tagger(200, "bob")
        await tagging.tag(100, "uniq-1", "file-1", "cats", "cute blue")
        await tagging.tag(200, "uniq-1", "file-1", "cats", "cute")

        removed = await tagging.untag(100, "uniq-1", "cute")

        assert removed == 1
        assert await tags_by_tagger(session_maker, alice.id) == ["blue"]
        assert await tags_by_tagger(session_maker, bob.id) == ["cute"]

    @pytest.mark.asyncio
    async def test_untag_removes_duplicates(self, tagging, make_tagger):
        await make_tagger(100, "alice")
        await tagging.tag(100, "uniq-1", "file-1", "cats", "cute cute blue")

        assert await tagging.untag(100, "uniq-1", "cute blue") == 3

    @pytest.mark.asyncio
    async def test_untag_matches_whole_tag_text(self, tagging, make_tagger):
        await make_tagger(100, "alice")
        await tagging.tag(100, "uniq-1", "file-1", "cats", "cuteness")

        assert await tagging.untag(100, "uniq-1", "cute") == 0

    @pytest.mark.asyncio
    async def test_untag_without_tags_is_a_noop(self, tagging, make_tagger, session_maker):
        await make_tagger(100, "alice")
        await tagging.tag(100, "uniq-1", "file-1", "cats", "cute")

        assert await tagging.untag(100, "uniq-1", "   ") == 0
        assert await count_rows(session_maker, TaggedSticker) == 1

    @pytest.mark.asyncio
    async def test_untag_unindexed_sticker(self, tagging, make_tagger, session_maker):
        await make_tagger(100, "alice")

        assert await tagging.untag(100, "never-tagged", "cute") == 0
        assert await count_rows(session_maker, Sticker) == 0

    @pytest.mark.asyncio
    async def test_untag_requires_approval(self, tagging, make_tagger):
        await make_tagger(100, "alice")
        await tagging.tag(100, "uniq-1", "file-1", "cats", "cute")
        await make_tagger(200, "mallory", allowed=False)

        with pytest.raises(NotAuthorized):
            await tagging.untag(200, "uniq-1", "cute")


class TestListTags:
    """Tests for listing a sticker's tags."""

    @pytest.mark.asyncio
    async def test_lists_tags_from_all_taggers(self, tagging, make_tagger):
        await make_tagger(100, "alice")
        await make_tagger(200, "bob")
        await tagging.tag(100, "uniq-1", "file-1", "cats", "cute blue")
        await tagging.tag(200, "uniq-1", "file-1", "cats", "cat")

        assert await tagging.list_tags("uniq-1") == ["cute", "blue", "cat"]

    @pytest.mark.asyncio
    async def test_unindexed_sticker_has_no_tags(self, tagging):
        assert await tagging.list_tags("never-tagged") == []


@pytest.mark.asyncio
async def test_tag_search_untag_round_trip(ctx, tagging, make_tagger):
    await make_tagger(100, "alice")
    search = SearchService(ctx)

    result = await tagging.tag(100, "uniq-1", "file-1", "cats", "cute blue")
    assert [hit.sticker_id for hit in await search.search("cute")] == [result.sticker_id]

    await tagging.untag(100, "uniq-1", "cute")

    assert await search.search("cute") == []
    assert [hit.sticker_id for hit in await search.search("blue")] == [result.sticker_id]
