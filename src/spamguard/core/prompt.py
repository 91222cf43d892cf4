"""Prompt construction and tolerant decoding of AI classifier replies."""

from __future__ import annotations

from dataclasses import dataclass
import json
import math
from typing import Optional

from spamguard.core.models import Message, SpamVerdict

PARSE_ERROR_REASON = "parse error"

_PROMPT_TEMPLATE = """You are a spam detection system for a group chat. Analyze this message and determine if it's spam.

SPAM indicators:
- Unsolicited promotions, ads, or marketing
- Crypto/forex/investment scams
- "Get rich quick" schemes
- Phishing or suspicious links
- Repeated/flooding messages
- Adult content promotions
- Fake giveaways or prizes
- Requests for personal/financial info
- Pyramid schemes or MLM recruitment

NOT spam:
- Normal conversations
- Questions and answers
- Sharing relevant links
- Announcements from admins
- Friendly banter

Group: {channel}
Sender: {sender}
Message: "{text}"

Respond with ONLY a JSON object (no markdown):
{{"isSpam": true/false, "confidence": 0-100, "reason": "brief explanation"}}"""


def build_prompt(message: Message) -> str:
    return _PROMPT_TEMPLATE.format(
        channel=message.channel_name,
        sender=message.sender_display_name,
        text=message.text,
    )


@dataclass(frozen=True)
class DecodeResult:
    """Tagged decode result: a verdict on success, an error otherwise."""

    verdict: Optional[SpamVerdict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.verdict is not None


def extract_json_object(raw: str) -> Optional[str]:
    """Return the first balanced ``{...}`` region of ``raw``.

    Braces inside JSON string literals are ignored, so a reason such as
    ``"looks like {promo}"`` does not end the object early.
    """

    start = raw.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(raw)):
        char = raw[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return raw[start : index + 1]
    return None


def _confidence_from(value: object) -> Optional[int]:
    # bool is an int subclass; "true" is not a confidence. Fractions are
    # truncated so 69.6 stays below a threshold of 70.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not 0 <= value <= 100:
        return None
    return math.floor(value)


def decode_verdict(raw: str) -> DecodeResult:
    """Decode a provider reply into an (ungated) verdict. Never raises."""

    region = extract_json_object(raw or "")
    if region is None:
        return DecodeResult(error="no JSON object in reply")
    try:
        payload = json.loads(region)
    except ValueError as exc:
        return DecodeResult(error=f"invalid JSON: {exc}")
    if not isinstance(payload, dict):
        return DecodeResult(error="reply is not a JSON object")

    is_spam = payload.get("isSpam")
    confidence = _confidence_from(payload.get("confidence"))
    reason = payload.get("reason")
    if not isinstance(is_spam, bool):
        return DecodeResult(error="isSpam is not a boolean")
    if confidence is None:
        return DecodeResult(error="confidence is not a number in 0-100")
    if not isinstance(reason, str):
        return DecodeResult(error="reason is not a string")

    return DecodeResult(verdict=SpamVerdict(is_spam=is_spam, confidence=confidence, reason=reason))
