from __future__ import annotations

from spamguard.core.channel_keys import (
    channel_key,
    expand_channel_key_variants,
    expand_monitored,
    is_monitored,
)


def test_channel_key_prefers_username() -> None:
    assert channel_key(-100555, "MyGroup") == "@mygroup"
    assert channel_key(-100555, None) == "chat_id:-100555"


def test_expand_chat_id_variants_positive() -> None:
    variants = expand_channel_key_variants("chat_id:123")
    assert "chat_id:123" in variants
    assert "chat_id:-123" in variants
    assert "chat_id:-1000000000123" in variants


def test_expand_chat_id_variants_negative_100() -> None:
    variants = expand_channel_key_variants("chat_id:-100987654321")
    assert "chat_id:-100987654321" in variants
    assert "chat_id:987654321" in variants


def test_bare_ids_and_usernames() -> None:
    assert "chat_id:-42" in expand_channel_key_variants("42")
    assert expand_channel_key_variants("@Team") == {"@team"}


def test_empty_monitored_set_means_all() -> None:
    assert is_monitored("chat_id:1", frozenset())
    monitored = expand_monitored(["@team", " "])
    assert is_monitored("@team", monitored)
    assert not is_monitored("@other", monitored)
