"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Create a temporary directory for the app-wide database and session file
_test_tmp_dir = tempfile.mkdtemp(prefix="sticker_search_test_")

# Set config BEFORE importing app modules
os.environ["STICKERS_CONFIG_PATH"] = _test_tmp_dir
os.environ["STICKERS_DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_test_tmp_dir) / 'app.db'}"
for _name in ("STICKERS_BOT_TOKEN", "STICKERS_TELEGRAM_API_ID", "STICKERS_TELEGRAM_API_HASH", "STICKERS_SECRET"):
    os.environ.pop(_name, None)

from sticker_search.db.models import Sticker, TaggedSticker, Tagger
from sticker_search.db.session import create_engine_for, create_session_maker, init_db
from sticker_search.services import BotContext

TEST_SECRET = "correct-horse-battery-staple"


@pytest.fixture
async def test_engine(tmp_path):
    """Create a file-backed SQLite engine per test.

    A file (not :memory:) is used so concurrent sessions really use
    separate connections.
    """
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'stickers.db'}")
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    """Session factory bound to the per-test engine."""
    return create_session_maker(test_engine)


@pytest.fixture
def ctx(session_maker) -> BotContext:
    """Bot context for services under test."""
    return BotContext(session_maker=session_maker, secret=TEST_SECRET, max_results=50)


@pytest.fixture
def admin_secret() -> str:
    """The admin secret configured on the test context."""
    return TEST_SECRET


@pytest.fixture
def make_tagger(session_maker):
    """Factory inserting a Tagger row directly."""

    async def _make(user_id: int, username: str, allowed: bool = True) -> Tagger:
        async with session_maker() as db:
            tagger = Tagger(user_id=user_id, username=username, allowed=allowed)
            db.add(tagger)
            await db.commit()
            return tagger

    return _make


@pytest.fixture
def make_sticker(session_maker):
    """Factory inserting a Sticker row, optionally with tags, directly."""

    async def _make(
        file_unique_id: str,
        *,
        popularity: int = 0,
        tags: list[str] | None = None,
        tagger: Tagger | None = None,
        set_name: str = "test_set",
    ) -> Sticker:
        async with session_maker() as db:
            sticker = Sticker(
                file_unique_id=file_unique_id,
                file_id=f"file-{file_unique_id}",
                set_name=set_name,
                popularity=popularity,
            )
            db.add(sticker)
            await db.flush()
            for tag in tags or []:
                db.add(
                    TaggedSticker(
                        tag=tag,
                        sticker_id=sticker.id,
                        tagger_id=tagger.id if tagger else 1,
                    )
                )
            await db.commit()
            return sticker

    return _make


@pytest.fixture
def client():
    """Create a test client for the FastAPI application."""
    from sticker_search.main import app

    with TestClient(app) as test_client:
        yield test_client


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp directories after test session."""
    import shutil
    if Path(_test_tmp_dir).exists():
        shutil.rmtree(_test_tmp_dir, ignore_errors=True)
