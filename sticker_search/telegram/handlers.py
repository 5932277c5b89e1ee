"""Telegram update handlers: commands, inline search and result feedback."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from telethon import events, types

from sticker_search.core.logging import get_logger
from sticker_search.services import (
    AlreadyRegistered,
    BotContext,
    DisplayNameMissing,
    InvalidSecret,
    NoTags,
    NotAuthorized,
    NotRegistered,
    PopularityService,
    SearchService,
    StickerSearchError,
    TaggerRegistry,
    TaggingService,
    Untaggable,
)
from sticker_search.telegram import strings
from sticker_search.telegram.commands import Command, help_text, parse_command
from sticker_search.telegram.stickers import input_document, sticker_ref

if TYPE_CHECKING:
    from telethon import TelegramClient

logger = get_logger(__name__)


def _error_reply(error: StickerSearchError) -> str:
    """Pick the reply text for a domain error."""
    if isinstance(error, NotAuthorized):
        return strings.TAG_NOT_AUTHORIZED
    if isinstance(error, Untaggable):
        return strings.NO_STICKER_SET
    if isinstance(error, NoTags):
        return strings.NO_TAGS
    if isinstance(error, InvalidSecret):
        return strings.NO_PERM
    if isinstance(error, NotRegistered):
        return strings.NOT_REGISTERED
    if isinstance(error, DisplayNameMissing):
        return strings.USERNAME_MISSING
    if isinstance(error, AlreadyRegistered):
        return strings.ALREADY_ALLOWED if error.tagger.allowed else strings.ALREADY_REGISTERED
    return strings.GENERIC_FAILURE


class BotHandlers:
    """Routes Telegram updates to the tagging, search and feedback services.

    Each update is handled independently; any failure is turned into a
    short reply (or a log line for inline updates) and never propagates to
    the client's update loop.
    """

    def __init__(
        self,
        ctx: BotContext,
        bot_username: str | None = None,
        inline_cache_time: int = 0,
    ) -> None:
        self.ctx = ctx
        self.bot_username = bot_username
        self.inline_cache_time = inline_cache_time
        self.registry = TaggerRegistry(ctx)
        self.tagging = TaggingService(ctx, registry=self.registry)
        self.search = SearchService(ctx)
        self.popularity = PopularityService(ctx)

    def register(self, client: TelegramClient) -> None:
        """Attach the handlers to a Telethon client."""
        client.add_event_handler(self.handle_message, events.NewMessage(incoming=True, pattern=r"^/"))
        client.add_event_handler(self.handle_inline_query, events.InlineQuery())
        client.add_event_handler(self.handle_inline_send, events.Raw(types.UpdateBotInlineSend))
        logger.info("bot_handlers_registered", bot_username=self.bot_username)

    # ---------- Commands ----------

    async def handle_message(self, event: Any) -> None:
        """Handle a command message."""
        command = parse_command(event.raw_text, self.bot_username)
        if command is None:
            return

        try:
            await self._dispatch(command, event)
        except StickerSearchError as e:
            if e.code in ("STORE_UNAVAILABLE", "RESOLUTION_FAILED"):
                logger.error("command_failed", command=command.name, code=e.code, error=e.message)
            else:
                logger.info("command_rejected", command=command.name, code=e.code, user_id=event.sender_id)
            await event.reply(_error_reply(e))
        except Exception as e:
            logger.error("command_handler_error", command=command.name, error=str(e), exc_info=True)
            await event.reply(strings.GENERIC_FAILURE)

    async def _dispatch(self, command: Command, event: Any) -> None:
        if command.name in ("help", "start"):
            await event.reply(help_text())
            return

        if event.sender_id is None:
            logger.info("command_from_unknown_sender", command=command.name)
            await event.reply(strings.SENDER_UNKNOWN)
            return

        if command.name == "register":
            await self._register(event)
        elif command.name == "allow":
            await self._allow(event, command)
        elif command.name == "tag":
            await self._tag(event, command)
        elif command.name == "untag":
            await self._untag(event, command)
        elif command.name == "listtags":
            await self._list_tags(event)

    async def _replied_sticker(self, event: Any, command_name: str):
        reply_to = await event.get_reply_message()
        ref = sticker_ref(reply_to)
        if ref is None:
            logger.info("command_without_sticker", command=command_name, user_id=event.sender_id)
            await event.reply(strings.NO_REPLY_STICKER)
        return ref

    async def _tag(self, event: Any, command: Command) -> None:
        ref = await self._replied_sticker(event, command.name)
        if ref is None:
            return

        result = await self.tagging.tag(
            event.sender_id,
            ref.file_unique_id,
            ref.file_id,
            ref.set_name,
            command.text,
        )

        text = strings.TAGGED_STICKER + "\n- " + "\n- ".join(result.applied)
        if result.failed:
            text += f"\n\n{strings.TAGS_NOT_APPLIED}\n- " + "\n- ".join(result.failed)
        await event.reply(text)

    async def _untag(self, event: Any, command: Command) -> None:
        ref = await self._replied_sticker(event, command.name)
        if ref is None:
            return

        removed = await self.tagging.untag(event.sender_id, ref.file_unique_id, command.text)
        await event.reply(strings.UNTAG_SUCCESS if removed else strings.UNTAG_NOTHING)

    async def _list_tags(self, event: Any) -> None:
        ref = await self._replied_sticker(event, "listtags")
        if ref is None:
            return

        tags = await self.tagging.list_tags(ref.file_unique_id)
        if not tags:
            await event.reply(strings.STICKER_UNTAGGED)
            return
        await event.reply(f"{strings.TAGS_ON_STICKER} {' '.join(tags)}")

    async def _register(self, event: Any) -> None:
        sender = await event.get_sender()
        username = getattr(sender, "username", None)
        await self.registry.register(event.sender_id, username)
        await event.reply(strings.NEED_APPROVAL)

    async def _allow(self, event: Any, command: Command) -> None:
        args = command.args
        if len(args) != 2:
            await event.reply(strings.WRONG_ARGNUM)
            return

        secret, username = args
        tagger = await self.registry.approve(secret, username)
        await event.reply(strings.ALLOWED_USER.format(username=tagger.username))

    # ---------- Inline search ----------

    async def handle_inline_query(self, event: Any) -> None:
        """Answer an inline query with ranked stickers."""
        query = event.text or ""
        if not query.strip():
            return

        logger.info("inline_query", user_id=event.sender_id, query=query)

        try:
            hits = await self.search.search(query)
            results = []
            for hit in hits:
                document = input_document(hit.file_id)
                if document is None:
                    logger.warning("unusable_sticker_file_id", sticker_id=hit.sticker_id)
                    continue
                # The sticker id comes back in UpdateBotInlineSend for popularity feedback
                results.append(
                    await event.builder.document(document, type="sticker", id=str(hit.sticker_id))
                )
            await event.answer(results, cache_time=self.inline_cache_time)
        except Exception as e:
            logger.error("inline_query_failed", query=query, error=str(e), exc_info=True)
            return

        logger.info("inline_query_answered", user_id=event.sender_id, results=len(results))

    # ---------- Feedback ----------

    async def handle_inline_send(self, update: Any) -> None:
        """Count a chosen inline result towards the sticker's popularity."""
        try:
            sticker_id = int(update.id)
        except (TypeError, ValueError):
            logger.warning("chosen_result_id_unparsable", result_id=getattr(update, "id", None))
            return

        try:
            await self.popularity.record_selection(sticker_id)
        except Exception as e:
            logger.error("chosen_result_failed", sticker_id=sticker_id, error=str(e), exc_info=True)
