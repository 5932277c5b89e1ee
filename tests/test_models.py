"""Tests for database models."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from sticker_search.db.models import Sticker, TaggedSticker, Tagger


@pytest.mark.asyncio
async def test_sticker_defaults(session_maker) -> None:
    """A new sticker starts with zero popularity."""
    async with session_maker() as db:
        db.add(Sticker(file_unique_id="AgADxyz", file_id="CAACAg", set_name="cats"))
        await db.commit()

        result = await db.execute(select(Sticker).where(Sticker.file_unique_id == "AgADxyz"))
        sticker = result.scalar_one()

    assert sticker.id is not None
    assert sticker.popularity == 0
    assert sticker.created_at is not None


@pytest.mark.asyncio
async def test_sticker_file_unique_id_is_unique(session_maker) -> None:
    """Inserting the same file unique id twice violates the unique constraint."""
    async with session_maker() as db:
        db.add(Sticker(file_unique_id="dup", file_id="a", set_name="cats"))
        await db.commit()

        db.add(Sticker(file_unique_id="dup", file_id="b", set_name="cats"))
        with pytest.raises(IntegrityError):
            await db.commit()


@pytest.mark.asyncio
async def test_tagger_defaults_to_not_allowed(session_maker) -> None:
    """A new tagger is not allowed to tag."""
    async with session_maker() as db:
        db.add(Tagger(user_id=42, username="alice"))
        await db.commit()

        result = await db.execute(select(Tagger).where(Tagger.user_id == 42))
        tagger = result.scalar_one()

    assert tagger.allowed is False


@pytest.mark.asyncio
async def test_duplicate_tag_rows_are_allowed(make_tagger, make_sticker, session_maker) -> None:
    """The same tag by the same tagger may be stored twice."""
    tagger = await make_tagger(1, "alice")
    sticker = await make_sticker("s1", tags=["cute", "cute"], tagger=tagger)

    async with session_maker() as db:
        result = await db.execute(
            select(TaggedSticker).where(TaggedSticker.sticker_id == sticker.id)
        )
        rows = result.scalars().all()

    assert [row.tag for row in rows] == ["cute", "cute"]
    assert all(row.ts is not None for row in rows)
