"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for AI providers and chat moderation so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Protocol


class ClassifierBackend(Protocol):
    """One external text classifier. Returns the provider's raw reply text."""

    name: str

    async def complete(self, prompt: str) -> str:
        ...


class ModerationPort(Protocol):
    """Chat actions the processor may request after a spam verdict."""

    async def is_privileged(self, chat_id: int) -> bool:
        ...

    async def delete_for_everyone(self, chat_id: int, message_id: int) -> None:
        ...

    async def announce_removal(self, chat_id: int, sender_display_name: str) -> None:
        ...
