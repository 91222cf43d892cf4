"""Decision cascade: keywords, then pattern rules, then the AI classifier.

Each stage returns a ``StageOutcome``. A conclusive outcome stops the
cascade; an inconclusive one may still carry a verdict, which becomes the
answer if no later stage concludes. Free offline checks always run before
the paid network call.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional, Protocol

from spamguard.core.ai_classifier import AIClassifier
from spamguard.core.keywords import KeywordMatcher
from spamguard.core.models import Message, SpamVerdict
from spamguard.core.patterns import DEFAULT_RULE_SET, NO_PATTERNS_REASON, PatternRuleSet, evaluate
from spamguard.core.rate_gate import RateGate

LOGGER = logging.getLogger(__name__)

RATE_LIMITED_REASON = "rate limited — rule-based only"


@dataclass(frozen=True)
class StageOutcome:
    verdict: Optional[SpamVerdict]
    conclusive: bool

    @classmethod
    def final(cls, verdict: SpamVerdict) -> "StageOutcome":
        return cls(verdict=verdict, conclusive=True)

    @classmethod
    def pending(cls, verdict: Optional[SpamVerdict] = None) -> "StageOutcome":
        return cls(verdict=verdict, conclusive=False)


class Stage(Protocol):
    name: str

    async def run(self, message: Message) -> StageOutcome:
        ...


class KeywordStage:
    name = "keywords"

    def __init__(self, matcher: KeywordMatcher) -> None:
        self._matcher = matcher

    async def run(self, message: Message) -> StageOutcome:
        verdict = self._matcher.match(message.text)
        if verdict is None:
            return StageOutcome.pending()
        return StageOutcome.final(verdict)


class PatternStage:
    name = "patterns"

    def __init__(self, rule_set: PatternRuleSet = DEFAULT_RULE_SET) -> None:
        self._rule_set = rule_set

    async def run(self, message: Message) -> StageOutcome:
        verdict = evaluate(message.text, self._rule_set)
        if verdict.is_spam:
            return StageOutcome.final(verdict)
        return StageOutcome.pending(verdict)


class AIStage:
    """Call the AI classifier when enabled and admitted by the rate gate."""

    name = "ai"

    def __init__(self, classifier: Optional[AIClassifier], gate: RateGate, enabled: bool = True) -> None:
        self._classifier = classifier
        self._gate = gate
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled and self._classifier is not None

    async def run(self, message: Message) -> StageOutcome:
        if not self.enabled:
            return StageOutcome.pending()
        if not self._gate.try_admit():
            LOGGER.warning("Rate limit reached, skipping AI check")
            return StageOutcome.final(SpamVerdict(is_spam=False, confidence=0, reason=RATE_LIMITED_REASON))
        # The classifier applies its own confidence threshold.
        return StageOutcome.final(await self._classifier.classify(message))


class SpamClassifier:
    """Run stages in order and return the first conclusive verdict."""

    def __init__(self, stages: Iterable[Stage]) -> None:
        self._stages: List[Stage] = list(stages)

    @classmethod
    def build(
        cls,
        keywords: Iterable[str],
        gate: RateGate,
        ai: Optional[AIClassifier] = None,
        use_ai: bool = True,
        rule_set: PatternRuleSet = DEFAULT_RULE_SET,
    ) -> "SpamClassifier":
        return cls(
            [
                KeywordStage(KeywordMatcher(keywords)),
                PatternStage(rule_set),
                AIStage(ai, gate, enabled=use_ai),
            ]
        )

    async def classify(self, message: Message) -> SpamVerdict:
        verdict = SpamVerdict(is_spam=False, confidence=0, reason=NO_PATTERNS_REASON)
        for stage in self._stages:
            outcome = await stage.run(message)
            if outcome.verdict is not None:
                verdict = outcome.verdict
            if outcome.conclusive:
                LOGGER.debug("Stage %s concluded: %s", stage.name, verdict.reason)
                break
        return verdict
