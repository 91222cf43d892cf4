"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Message:
    """Classification input. Callers guarantee non-empty, trimmed text."""

    text: str
    sender_display_name: str
    channel_name: str


@dataclass(frozen=True)
class SpamVerdict:
    """Output of any detection layer."""

    is_spam: bool
    confidence: int
    reason: str

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence out of range: {self.confidence}")


@dataclass(frozen=True)
class IncomingMessage:
    """A "new message" event as handed over by the transport adapter."""

    text: str
    sender_display_name: str
    channel_name: str
    channel_key: str
    chat_id: int
    message_id: int
    channel_is_group: bool
    sender_is_self: bool

    def to_message(self) -> Message:
        return Message(
            text=self.text.strip(),
            sender_display_name=self.sender_display_name,
            channel_name=self.channel_name,
        )


class ModAction(Enum):
    """What the processor did with a message."""

    IGNORED = "ignored"
    ALLOWED = "allowed"
    NOT_PRIVILEGED = "not_privileged"
    DRY_RUN = "dry_run"
    DELETED = "deleted"
    DELETE_FAILED = "delete_failed"


@dataclass(frozen=True)
class ModerationOutcome:
    """Result of handling one incoming message."""

    action: ModAction
    verdict: Optional[SpamVerdict] = None


@dataclass(frozen=True)
class ActingIdentity:
    """The logged-in account whose admin rights decide every deletion."""

    user_id: int
    display_name: str
