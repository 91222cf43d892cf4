"""Telethon client construction for the moderator account."""

from __future__ import annotations

import logging
from typing import Optional

from telethon import TelegramClient

from spamguard import settings
from spamguard.core.config import TelegramSettings

LOGGER = logging.getLogger(__name__)


def build_client(telegram: Optional[TelegramSettings] = None) -> TelegramClient:
    """Return an unconnected client for the configured session file.

    The session file keeps the login across restarts, so the account that
    deletes messages is whichever account last logged into it.
    """

    telegram = telegram or settings.TELEGRAM
    if not telegram.has_credentials:
        raise RuntimeError("Missing API_ID or API_HASH (environment or config.json telegram section)")

    LOGGER.info("Opening Telegram session %r", telegram.session_name)
    return TelegramClient(telegram.session_name, telegram.api_id, telegram.api_hash)
