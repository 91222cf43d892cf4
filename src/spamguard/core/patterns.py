"""Heuristic pattern rules for group-invite and scam spam (core domain).

Rules are evaluated in a strict order and the first satisfied rule wins:

1. High-confidence phrase anywhere in the text (95).
2. Group invite link together with scam vocabulary (90 for 2+ terms, 75 for one).
3. Three or more vocabulary terms without any invite link (80).

Invite links alone are common in legitimate chats, so they only count when
scam vocabulary shows up next to them.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import re
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from spamguard.core.models import SpamVerdict

INVITE_PATTERNS: Tuple[str, ...] = (
    r"chat\.whatsapp\.com/(?:invite/)?[A-Za-z0-9]{10,}",
    r"(?:t|telegram)\.me/(?:joinchat/|\+)[A-Za-z0-9_-]{10,}",
    r"discord(?:\.gg|(?:app)?\.com/invite)/[A-Za-z0-9-]{2,}",
    # Generic chat.<domain>/<code> invite shape used by several messengers.
    r"https?://chat\.[a-z0-9-]+(?:\.[a-z0-9-]+)+/[A-Za-z0-9]{16,}",
)

# Terms are matched as lower-case substrings. Avoid terms that are substrings
# of one another, otherwise one word counts twice.
VOCABULARY: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "financial_scam",
        (
            "guaranteed profit",
            "guaranteed returns",
            "passive income",
            "financial freedom",
            "daily profit",
            "investment",
            "withdrawal",
        ),
    ),
    (
        "crypto",
        ("crypto", "bitcoin", "btc", "usdt", "forex", "binary option", "signal", "airdrop"),
    ),
    (
        "training_scam",
        ("trading", "mentorship", "masterclass", "free training", "account manager"),
    ),
    (
        "mlm",
        (
            "network marketing",
            "downline",
            "be your own boss",
            "work from home",
            "business opportunity",
        ),
    ),
    ("gambling", ("casino", "betting", "jackpot", "free spins", "slot machine")),
    ("adult", ("onlyfans", "xxx", "nudes", "hot singles", "adult content")),
)

HIGH_CONFIDENCE_PHRASES: Tuple[str, ...] = (
    "join our trading group",
    "join our crypto group",
    "join our forex group",
    "join our vip group",
    "guaranteed returns",
    "double your money",
    "double your investment",
    "risk-free investment",
    "100% guaranteed profit",
    "get rich quick",
)

NO_PATTERNS_REASON = "no spam patterns detected"


@dataclass(frozen=True)
class PatternRuleSet:
    """Immutable bundle of invite matchers, vocabulary and instant phrases."""

    invite_patterns: Tuple[re.Pattern, ...]
    vocabulary: Tuple[Tuple[str, Tuple[str, ...]], ...]
    high_confidence_phrases: Tuple[str, ...]

    def terms(self) -> List[str]:
        """All vocabulary terms, in table order, without repeats."""

        seen: List[str] = []
        for _, terms in self.vocabulary:
            for term in terms:
                if term not in seen:
                    seen.append(term)
        return seen


def _lower_all(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(value.strip().lower() for value in values if value.strip())


def build_rule_set(
    invite_patterns: Sequence[str] = INVITE_PATTERNS,
    vocabulary: Mapping[str, Sequence[str]] | Sequence[Tuple[str, Sequence[str]]] = VOCABULARY,
    high_confidence_phrases: Sequence[str] = HIGH_CONFIDENCE_PHRASES,
) -> PatternRuleSet:
    """Normalize raw tables and compile invite regexes once."""

    items = vocabulary.items() if isinstance(vocabulary, Mapping) else vocabulary
    return PatternRuleSet(
        invite_patterns=tuple(re.compile(pattern, re.IGNORECASE) for pattern in invite_patterns),
        vocabulary=tuple((category, _lower_all(terms)) for category, terms in items),
        high_confidence_phrases=_lower_all(high_confidence_phrases),
    )


DEFAULT_RULE_SET = build_rule_set()


def load_rule_set(path: str) -> PatternRuleSet:
    """Load a rule table from JSON, falling back to defaults per missing key.

    The file may define any of ``invite_patterns`` (list of regexes),
    ``vocabulary`` (object of category -> list of terms) and
    ``high_confidence_phrases`` (list of phrases).
    """

    with open(path, "r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError(f"Pattern file must contain a JSON object: {path}")
    return build_rule_set(
        invite_patterns=raw.get("invite_patterns", INVITE_PATTERNS),
        vocabulary=raw.get("vocabulary", VOCABULARY),
        high_confidence_phrases=raw.get("high_confidence_phrases", HIGH_CONFIDENCE_PHRASES),
    )


def has_invite_link(text: str, rule_set: PatternRuleSet = DEFAULT_RULE_SET) -> bool:
    return any(pattern.search(text) for pattern in rule_set.invite_patterns)


def vocabulary_hits(text: str, rule_set: PatternRuleSet = DEFAULT_RULE_SET) -> List[str]:
    """Distinct vocabulary terms present in the text, in table order."""

    lowered = text.lower()
    return [term for term in rule_set.terms() if term in lowered]


def _high_confidence_phrase(lowered: str, rule_set: PatternRuleSet) -> Optional[str]:
    for phrase in rule_set.high_confidence_phrases:
        if phrase in lowered:
            return phrase
    return None


def evaluate(text: str, rule_set: PatternRuleSet = DEFAULT_RULE_SET) -> SpamVerdict:
    """Score text against the rule set. Always returns a verdict."""

    phrase = _high_confidence_phrase(text.lower(), rule_set)
    if phrase:
        return SpamVerdict(is_spam=True, confidence=95, reason=f"high-confidence phrase: {phrase}")

    hits = vocabulary_hits(text, rule_set)
    if has_invite_link(text, rule_set):
        if len(hits) >= 2:
            return SpamVerdict(
                is_spam=True,
                confidence=90,
                reason=f"group invite link with spam keywords: {', '.join(hits[:3])}",
            )
        if len(hits) == 1:
            return SpamVerdict(
                is_spam=True,
                confidence=75,
                reason=f"group invite link with spam keyword: {hits[0]}",
            )

    if len(hits) >= 3:
        return SpamVerdict(
            is_spam=True,
            confidence=80,
            reason=f"multiple spam keywords: {', '.join(hits[:3])}",
        )

    return SpamVerdict(is_spam=False, confidence=0, reason=NO_PATTERNS_REASON)
