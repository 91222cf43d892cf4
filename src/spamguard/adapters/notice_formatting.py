"""Shared text formatting for moderation notices and console reports."""

from __future__ import annotations

from spamguard.core.models import SpamVerdict


def format_removal_notice(sender_display_name: str) -> str:
    """Short notice posted to the group after a spam message is removed."""

    return f"⚠️ Spam message from {sender_display_name} was removed."


def format_verdict_line(verdict: SpamVerdict) -> str:
    """One-line verdict summary used by the ``check`` command."""

    label = "SPAM" if verdict.is_spam else "OK"
    return f"{label} ({verdict.confidence}%): {verdict.reason}"
