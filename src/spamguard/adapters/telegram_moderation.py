"""Telegram moderation adapter.

Implements the core ModerationPort on top of a connected Telethon client.
"""

from __future__ import annotations

import logging

from spamguard.adapters.notice_formatting import format_removal_notice

LOGGER = logging.getLogger(__name__)


class TelegramModerator:
    """Privilege checks, deletion and notices for the logged-in account."""

    def __init__(self, client, acting_user="me") -> None:
        # Telethon accepts "me" or a user id here.
        self._client = client
        self._acting_user = acting_user

    async def is_privileged(self, chat_id: int) -> bool:
        """True when we may delete other members' messages in the chat.

        Lookup failures count as "not privileged".
        """

        try:
            permissions = await self._client.get_permissions(chat_id, self._acting_user)
        except Exception:
            LOGGER.exception("Failed to resolve admin rights in %s", chat_id)
            return False
        if getattr(permissions, "is_creator", False):
            return True
        if not getattr(permissions, "is_admin", False):
            return False
        return bool(getattr(permissions, "delete_messages", True))

    async def delete_for_everyone(self, chat_id: int, message_id: int) -> None:
        await self._client.delete_messages(chat_id, [message_id], revoke=True)

    async def announce_removal(self, chat_id: int, sender_display_name: str) -> None:
        await self._client.send_message(chat_id, format_removal_notice(sender_display_name))
