"""AI classification adapter: one provider call, fail-soft, threshold-gated."""

from __future__ import annotations

import asyncio
import logging

from spamguard.core.models import Message, SpamVerdict
from spamguard.core.ports import ClassifierBackend
from spamguard.core.prompt import PARSE_ERROR_REASON, build_prompt, decode_verdict

LOGGER = logging.getLogger(__name__)

PROVIDER_ERROR_REASON = "provider error"
DEFAULT_THRESHOLD = 70


def apply_threshold(verdict: SpamVerdict, threshold: int = DEFAULT_THRESHOLD) -> SpamVerdict:
    """Force ``is_spam`` off below the threshold, keeping confidence and reason."""

    if verdict.is_spam and verdict.confidence < threshold:
        return SpamVerdict(is_spam=False, confidence=verdict.confidence, reason=verdict.reason)
    return verdict


class AIClassifier:
    """Ask the configured backend about one message.

    A single attempt is made. Timeouts, transport and auth failures become a
    negative "provider error" verdict and are never raised to the caller.
    """

    def __init__(
        self,
        backend: ClassifierBackend,
        timeout_seconds: float = 15.0,
        threshold: int = DEFAULT_THRESHOLD,
    ) -> None:
        self._backend = backend
        self._timeout = timeout_seconds
        self._threshold = threshold

    @property
    def backend_name(self) -> str:
        return self._backend.name

    async def classify(self, message: Message) -> SpamVerdict:
        prompt = build_prompt(message)
        try:
            raw = await asyncio.wait_for(self._backend.complete(prompt), timeout=self._timeout)
        except asyncio.TimeoutError:
            LOGGER.error("AI detection timed out after %ss (%s)", self._timeout, self._backend.name)
            return SpamVerdict(is_spam=False, confidence=0, reason=PROVIDER_ERROR_REASON)
        except Exception as exc:
            LOGGER.error("AI detection error (%s): %s", self._backend.name, exc)
            return SpamVerdict(is_spam=False, confidence=0, reason=PROVIDER_ERROR_REASON)

        decoded = decode_verdict(raw)
        if not decoded.ok:
            LOGGER.warning("Failed to parse AI response (%s): %r", decoded.error, str(raw)[:200])
            return SpamVerdict(is_spam=False, confidence=0, reason=PARSE_ERROR_REASON)

        return apply_threshold(decoded.verdict, self._threshold)

    async def aclose(self) -> None:
        close = getattr(self._backend, "aclose", None)
        if close is not None:
            await close()
