"""Database session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sticker_search.core.config import settings


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _ensure_sqlite_dir(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    database = make_url(url).database
    if not database or database == ":memory:":
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable WAL mode so readers and the single writer don't block each other."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=30000")  # 30 second busy timeout
    cursor.close()


def create_engine_for(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL.

    SQLite engines get a lock timeout and WAL pragmas on every connection.

    Args:
        url: SQLAlchemy database URL.
        echo: Log emitted SQL.

    Returns:
        The configured async engine.
    """
    if not _is_sqlite(url):
        return create_async_engine(url, echo=echo, future=True, pool_pre_ping=True)

    _ensure_sqlite_dir(url)
    new_engine = create_async_engine(
        url,
        echo=echo,
        future=True,
        connect_args={
            "timeout": 30,  # Wait up to 30 seconds for locks
        },
        pool_pre_ping=True,
    )
    event.listen(new_engine.sync_engine, "connect", _set_sqlite_pragma)
    return new_engine


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_db(bind: AsyncEngine) -> None:
    """Create all tables that don't exist yet."""
    # Models must be imported so their tables are registered on the metadata
    from sticker_search.db import models  # noqa: F401
    from sticker_search.db.base import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = create_engine_for(settings.database_url, echo=settings.debug)

async_session_maker = create_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Yields:
        An async database session.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
