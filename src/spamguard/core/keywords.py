"""Operator keyword blocklist (core domain)."""

from __future__ import annotations

from typing import Iterable, List, Optional

from spamguard.core.models import SpamVerdict


def normalize_keywords(keywords: Iterable[str]) -> List[str]:
    """Lower-case and trim keywords, dropping blanks and repeats, keeping order."""

    normalized: List[str] = []
    for keyword in keywords:
        value = keyword.strip().lower()
        if value and value not in normalized:
            normalized.append(value)
    return normalized


class KeywordMatcher:
    """Case-insensitive substring match, first keyword in list order wins."""

    def __init__(self, keywords: Iterable[str]) -> None:
        self._keywords = normalize_keywords(keywords)

    @property
    def keywords(self) -> List[str]:
        return list(self._keywords)

    def match(self, text: str) -> Optional[SpamVerdict]:
        lowered = text.lower()
        for keyword in self._keywords:
            if keyword in lowered:
                return SpamVerdict(
                    is_spam=True,
                    confidence=100,
                    reason=f"Contains blocked keyword: {keyword}",
                )
        return None
