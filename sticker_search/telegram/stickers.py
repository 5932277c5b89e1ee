"""Extract sticker identity from Telethon messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from telethon import types, utils


@dataclass(frozen=True)
class StickerRef:
    """What the services need to know about a Telegram sticker."""

    file_unique_id: str
    file_id: str
    set_name: str | None


def _set_name(document: types.Document) -> str | None:
    for attribute in document.attributes:
        if not isinstance(attribute, types.DocumentAttributeSticker):
            continue
        stickerset = attribute.stickerset
        if isinstance(stickerset, types.InputStickerSetShortName):
            return stickerset.short_name
        if isinstance(stickerset, types.InputStickerSetID):
            return str(stickerset.id)
        return None
    return None


def sticker_ref(message: Any) -> StickerRef | None:
    """Build a StickerRef from a message containing a sticker.

    The document id is stable across re-uploads and forwards, so it serves
    as the unique key. ``file_id`` is a Bot API style id that can be turned
    back into an input document to answer inline queries.

    Args:
        message: A Telethon message, or None.

    Returns:
        The sticker reference, or None if the message has no sticker.
    """
    if message is None:
        return None

    document = getattr(message, "sticker", None)
    if not isinstance(document, types.Document):
        return None

    return StickerRef(
        file_unique_id=str(document.id),
        file_id=utils.pack_bot_file_id(document),
        set_name=_set_name(document),
    )


def input_document(file_id: str) -> types.Document | None:
    """Turn a stored ``file_id`` back into a document for inline answers."""
    resolved = utils.resolve_bot_file_id(file_id)
    if isinstance(resolved, types.Document):
        return resolved
    return None
