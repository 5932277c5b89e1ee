"""Tagger registry: registration and admin approval of taggers."""

from __future__ import annotations

import hmac

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from sticker_search.core.logging import get_logger
from sticker_search.db.models import Tagger
from sticker_search.services.context import BotContext
from sticker_search.services.exceptions import (
    AlreadyRegistered,
    DisplayNameMissing,
    InvalidSecret,
    NotRegistered,
    StoreUnavailable,
)

logger = get_logger(__name__)


class TaggerRegistry:
    """Tracks which Telegram users may tag stickers.

    A user moves from unknown to registered (``allowed=False``) via
    :meth:`register`, and from registered to allowed via :meth:`approve`.
    There is no way back.
    """

    def __init__(self, ctx: BotContext):
        """Initialize the registry.

        Args:
            ctx: Shared bot context.
        """
        self.ctx = ctx

    async def get_tagger(self, user_id: int) -> Tagger | None:
        """Look up a tagger by Telegram user id.

        Raises:
            StoreUnavailable: On database errors.
        """
        try:
            async with self.ctx.session_maker() as db:
                result = await db.execute(select(Tagger).where(Tagger.user_id == user_id))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("tagger_lookup_failed", user_id=user_id, error=str(e))
            raise StoreUnavailable() from e

    async def is_allowed(self, user_id: int) -> bool:
        """Check whether a user has been approved. Unknown users are not."""
        tagger = await self.get_tagger(user_id)
        return tagger is not None and tagger.allowed

    async def register(self, user_id: int, username: str | None) -> Tagger:
        """Register a user as a tagger awaiting approval.

        Args:
            user_id: Telegram user id.
            username: Telegram username; required.

        Returns:
            The new Tagger with ``allowed=False``.

        Raises:
            DisplayNameMissing: If the user has no username.
            AlreadyRegistered: If the user id is already registered.
            StoreUnavailable: On other database errors.
        """
        if not username:
            raise DisplayNameMissing()

        tagger = Tagger(user_id=user_id, username=username, allowed=False)
        try:
            async with self.ctx.session_maker() as db:
                db.add(tagger)
                try:
                    await db.commit()
                except IntegrityError:
                    await db.rollback()
                    result = await db.execute(select(Tagger).where(Tagger.user_id == user_id))
                    existing = result.scalar_one_or_none()
                    if existing is None:
                        raise
                    logger.info("tagger_already_registered", username=username, allowed=existing.allowed)
                    raise AlreadyRegistered(existing)
        except SQLAlchemyError as e:
            logger.error("tagger_register_failed", username=username, error=str(e))
            raise StoreUnavailable() from e

        logger.info("tagger_registered", username=username, user_id=user_id)
        return tagger

    async def approve(self, secret: str, username: str) -> Tagger:
        """Allow a registered user to tag.

        The secret is checked before the username is looked up, so a wrong
        secret never reveals whether the user exists.

        Args:
            secret: Shared admin secret.
            username: Username the user registered with.

        Returns:
            The updated Tagger.

        Raises:
            InvalidSecret: If the secret doesn't match.
            NotRegistered: If no tagger has that username.
            StoreUnavailable: On database errors.
        """
        if not hmac.compare_digest(secret.encode("utf-8"), self.ctx.secret.encode("utf-8")):
            logger.warning("tagger_approve_bad_secret")
            raise InvalidSecret()

        try:
            async with self.ctx.session_maker() as db:
                result = await db.execute(
                    select(Tagger).where(Tagger.username == username).order_by(Tagger.id).limit(1)
                )
                tagger = result.scalar_one_or_none()
                if tagger is None:
                    logger.info("tagger_approve_not_registered", username=username)
                    raise NotRegistered()

                if not tagger.allowed:
                    tagger.allowed = True
                    await db.commit()
        except SQLAlchemyError as e:
            logger.error("tagger_approve_failed", username=username, error=str(e))
            raise StoreUnavailable() from e

        logger.info("tagger_approved", username=tagger.username, user_id=tagger.user_id)
        return tagger
