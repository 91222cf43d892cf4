from __future__ import annotations

import asyncio

from spamguard.core.channel_keys import expand_monitored
from spamguard.core.models import IncomingMessage, ModAction, SpamVerdict
from spamguard.core.orchestrator import SpamClassifier
from spamguard.core.processor import MessageProcessor
from spamguard.core.rate_gate import RateGate


class FakeModeration:
    def __init__(self, privileged: bool = True, delete_error: Exception | None = None) -> None:
        self._privileged = privileged
        self._delete_error = delete_error
        self.privilege_checks: list[int] = []
        self.deleted: list[tuple[int, int]] = []
        self.notices: list[tuple[int, str]] = []

    async def is_privileged(self, chat_id: int) -> bool:
        self.privilege_checks.append(chat_id)
        return self._privileged

    async def delete_for_everyone(self, chat_id: int, message_id: int) -> None:
        if self._delete_error is not None:
            raise self._delete_error
        self.deleted.append((chat_id, message_id))

    async def announce_removal(self, chat_id: int, sender_display_name: str) -> None:
        self.notices.append((chat_id, sender_display_name))


SPAM_TEXT = "Join our trading group and double your money"


def _incoming(
    text: str = SPAM_TEXT,
    *,
    channel_key: str = "chat_id:-100123",
    is_group: bool = True,
    from_self: bool = False,
) -> IncomingMessage:
    return IncomingMessage(
        text=text,
        sender_display_name="Mallory",
        channel_name="Neighbours",
        channel_key=channel_key,
        chat_id=-100123,
        message_id=42,
        channel_is_group=is_group,
        sender_is_self=from_self,
    )


def _processor(moderation: FakeModeration, **kwargs) -> MessageProcessor:
    classifier = SpamClassifier.build(keywords=["forbidden"], gate=RateGate())
    return MessageProcessor(classifier=classifier, moderation=moderation, **kwargs)


def test_spam_is_deleted_for_everyone() -> None:
    moderation = FakeModeration()
    outcome = asyncio.run(_processor(moderation).handle(_incoming()))

    assert outcome.action is ModAction.DELETED
    assert outcome.verdict == SpamVerdict(
        is_spam=True, confidence=95, reason="high-confidence phrase: join our trading group"
    )
    assert moderation.deleted == [(-100123, 42)]
    assert moderation.notices == []


def test_clean_message_is_allowed_without_privilege_lookup() -> None:
    moderation = FakeModeration()
    outcome = asyncio.run(_processor(moderation).handle(_incoming("see you at 6")))

    assert outcome.action is ModAction.ALLOWED
    assert moderation.privilege_checks == []
    assert moderation.deleted == []


def test_not_privileged_never_deletes() -> None:
    for dry_run in (False, True):
        moderation = FakeModeration(privileged=False)
        outcome = asyncio.run(_processor(moderation, dry_run=dry_run).handle(_incoming()))

        assert outcome.action is ModAction.NOT_PRIVILEGED
        assert outcome.verdict.is_spam is True
        assert moderation.deleted == []


def test_dry_run_reports_without_deleting() -> None:
    moderation = FakeModeration()
    outcome = asyncio.run(_processor(moderation, dry_run=True).handle(_incoming()))

    assert outcome.action is ModAction.DRY_RUN
    assert moderation.privilege_checks == [-100123]
    assert moderation.deleted == []


def test_delete_failure_is_reported_not_raised() -> None:
    moderation = FakeModeration(delete_error=RuntimeError("message too old"))
    outcome = asyncio.run(_processor(moderation).handle(_incoming()))
    assert outcome.action is ModAction.DELETE_FAILED


def test_removal_notice_after_live_delete() -> None:
    moderation = FakeModeration()
    asyncio.run(_processor(moderation, announce_removals=True).handle(_incoming()))
    assert moderation.notices == [(-100123, "Mallory")]


def test_prefilters_skip_classification() -> None:
    moderation = FakeModeration()
    processor = _processor(moderation)
    skipped = [
        _incoming(is_group=False),
        _incoming(from_self=True),
        _incoming("   \n "),
    ]
    for incoming in skipped:
        assert asyncio.run(processor.handle(incoming)).action is ModAction.IGNORED
    assert moderation.privilege_checks == []


def test_monitored_channels_filter() -> None:
    moderation = FakeModeration()
    processor = _processor(moderation, monitored_channels=expand_monitored(["@other"]))
    outcome = asyncio.run(processor.handle(_incoming()))
    assert outcome.action is ModAction.IGNORED

    processor = _processor(moderation, monitored_channels=expand_monitored(["-100123"]))
    outcome = asyncio.run(processor.handle(_incoming()))
    assert outcome.action is ModAction.DELETED


def test_text_is_trimmed_before_classification() -> None:
    moderation = FakeModeration()
    outcome = asyncio.run(_processor(moderation).handle(_incoming("  FORBIDDEN words  ")))
    assert outcome.verdict.reason == "Contains blocked keyword: forbidden"
