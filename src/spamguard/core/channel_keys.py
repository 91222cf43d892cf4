"""Helpers for identifying monitored channels by a stable key.

A channel key is ``@username`` for public groups and ``chat_id:<id>``
otherwise. Telegram exposes the same group under several ids (peer id,
chat id, channel id), so configured keys are expanded to all variants.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, Optional


def channel_key(chat_id: int, username: Optional[str] = None) -> str:
    """Normalize a channel key using a single rule enforced across the app."""

    if username:
        return f"@{username.lower()}"
    return f"chat_id:{chat_id}"


def _expand_chat_id_variants(raw_chat_id: int) -> set[int]:
    """Return equivalent chat id variants (peer id, chat id, channel id)."""

    variants: set[int] = {raw_chat_id}
    if raw_chat_id < 0:
        raw_text = str(raw_chat_id)
        if raw_text.startswith("-100"):
            # Channel/supergroup peer id: -100<channel_id>
            channel_part = raw_text[4:]
            if channel_part.isdigit():
                variants.add(int(channel_part))
        else:
            variants.add(abs(raw_chat_id))
        return variants

    variants.add(-raw_chat_id)
    variants.add(-1000000000000 - raw_chat_id)
    return variants


def expand_channel_key_variants(key: str) -> set[str]:
    """Expand a configured key to include equivalent chat_id variants."""

    key = key.strip()
    if key.startswith("@"):
        return {key.lower()}
    if not key.startswith("chat_id:"):
        # Bare numeric ids are accepted for convenience.
        if key.lstrip("-").isdigit():
            key = f"chat_id:{key}"
        else:
            return {key}

    try:
        raw_chat_id = int(key.split("chat_id:", 1)[1])
    except ValueError:
        return {key}
    return {f"chat_id:{variant}" for variant in _expand_chat_id_variants(raw_chat_id)}


def expand_monitored(keys: Iterable[str]) -> frozenset[str]:
    expanded: set[str] = set()
    for key in keys:
        if key.strip():
            expanded.update(expand_channel_key_variants(key))
    return frozenset(expanded)


def is_monitored(key: str, monitored: AbstractSet[str]) -> bool:
    """An empty monitored set means every group is monitored."""

    return not monitored or key in monitored
