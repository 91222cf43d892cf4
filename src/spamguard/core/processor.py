"""Core message moderation pipeline.

This module is integration-agnostic. It only relies on the moderation port,
enabling other transports without changes here.

The pipeline enforces a strict order:
1) Fast-exit for non-group chats, our own messages, blank text and
   unmonitored channels
2) Classify through the keyword -> pattern -> AI cascade
3) On spam, confirm we are a privileged member of the channel
4) Delete for everyone, or only report in dry-run mode
"""

from __future__ import annotations

import logging
from typing import AbstractSet

from spamguard.core.channel_keys import is_monitored
from spamguard.core.models import IncomingMessage, ModAction, ModerationOutcome
from spamguard.core.orchestrator import SpamClassifier
from spamguard.core.ports import ModerationPort

LOGGER = logging.getLogger(__name__)

_PREVIEW_CHARS = 50


class MessageProcessor:
    """Orchestrates pre-filters, classification and moderation actions."""

    def __init__(
        self,
        classifier: SpamClassifier,
        moderation: ModerationPort,
        monitored_channels: AbstractSet[str] = frozenset(),
        dry_run: bool = False,
        announce_removals: bool = False,
    ) -> None:
        self._classifier = classifier
        self._moderation = moderation
        self._monitored = monitored_channels
        self._dry_run = dry_run
        self._announce = announce_removals

    def accepts(self, incoming: IncomingMessage) -> bool:
        if not incoming.channel_is_group or incoming.sender_is_self:
            return False
        if not incoming.text.strip():
            return False
        return is_monitored(incoming.channel_key, self._monitored)

    async def handle(self, incoming: IncomingMessage) -> ModerationOutcome:
        """Process one incoming message through the moderation pipeline."""

        if not self.accepts(incoming):
            return ModerationOutcome(action=ModAction.IGNORED)

        message = incoming.to_message()
        LOGGER.info(
            "[%s] %s: %s",
            message.channel_name,
            message.sender_display_name,
            message.text[:_PREVIEW_CHARS],
        )
        verdict = await self._classifier.classify(message)
        if not verdict.is_spam:
            LOGGER.info("OK (%s%%): %s", verdict.confidence, verdict.reason)
            return ModerationOutcome(action=ModAction.ALLOWED, verdict=verdict)

        LOGGER.warning("SPAM DETECTED (%s%%): %s", verdict.confidence, verdict.reason)

        # Deletion is pointless without admin rights; the verdict still stands.
        if not await self._moderation.is_privileged(incoming.chat_id):
            LOGGER.warning("Cannot delete: not an admin in %s", message.channel_name)
            return ModerationOutcome(action=ModAction.NOT_PRIVILEGED, verdict=verdict)

        if self._dry_run:
            LOGGER.info("DRY RUN: would delete message %s in %s", incoming.message_id, message.channel_name)
            return ModerationOutcome(action=ModAction.DRY_RUN, verdict=verdict)

        try:
            await self._moderation.delete_for_everyone(incoming.chat_id, incoming.message_id)
        except Exception:
            LOGGER.exception("Failed to delete message %s in %s", incoming.message_id, message.channel_name)
            return ModerationOutcome(action=ModAction.DELETE_FAILED, verdict=verdict)
        LOGGER.info("Message deleted for everyone")

        if self._announce:
            await self._send_notice(incoming)
        return ModerationOutcome(action=ModAction.DELETED, verdict=verdict)

    async def _send_notice(self, incoming: IncomingMessage) -> None:
        try:
            await self._moderation.announce_removal(incoming.chat_id, incoming.sender_display_name)
        except Exception:
            LOGGER.exception("Failed to post removal notice in %s", incoming.channel_name)
