"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Any

from telethon.tl.custom import Message

from spamguard.core.channel_keys import channel_key
from spamguard.core.models import IncomingMessage


def display_name(entity: Any, fallback: str = "Unknown") -> str:
    """Human-readable name for a user, chat or channel entity."""

    title = getattr(entity, "title", None)
    if title:
        return str(title)
    first = getattr(entity, "first_name", None)
    last = getattr(entity, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    username = getattr(entity, "username", None)
    if username:
        return str(username)
    entity_id = getattr(entity, "id", None)
    if entity_id is not None:
        return str(entity_id)
    return fallback


async def build_incoming(message: Message) -> IncomingMessage:
    """Build a core IncomingMessage from a Telethon Message."""

    chat = await message.get_chat()
    sender = await message.get_sender()
    return IncomingMessage(
        text=message.raw_text or "",
        sender_display_name=display_name(sender, fallback=str(message.sender_id or "Unknown")),
        channel_name=display_name(chat, fallback=str(message.chat_id)),
        channel_key=channel_key(message.chat_id, getattr(chat, "username", None)),
        chat_id=message.chat_id,
        message_id=message.id,
        channel_is_group=bool(message.is_group),
        sender_is_self=bool(message.out),
    )
