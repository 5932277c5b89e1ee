"""Database package for Sticker Search."""

from sticker_search.db.base import Base
from sticker_search.db.session import async_session_maker, engine, get_db, init_db

__all__ = [
    "Base",
    "async_session_maker",
    "engine",
    "get_db",
    "init_db",
]
