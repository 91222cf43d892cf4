"""Application entry point for the spamguard moderator."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from telethon import events

from spamguard import settings
from spamguard.adapters.notice_formatting import format_verdict_line
from spamguard.adapters.providers import build_backend, credentials_from_env, select_provider
from spamguard.adapters.telegram_mapper import build_incoming, display_name
from spamguard.adapters.telegram_moderation import TelegramModerator
from spamguard.client import build_client
from spamguard.core.ai_classifier import AIClassifier
from spamguard.core.channel_keys import channel_key, is_monitored
from spamguard.core.config import GuardConfig
from spamguard.core.models import ActingIdentity, Message
from spamguard.core.orchestrator import SpamClassifier
from spamguard.core.patterns import DEFAULT_RULE_SET, PatternRuleSet, load_rule_set
from spamguard.core.processor import MessageProcessor
from spamguard.core.rate_gate import RateGate
from spamguard.get_session import authorize

NAME = "SPAMGUARD"
FONT = "tarty-1"

# Always redacted, on top of logging.redact.patterns.
SECRET_ENV_NAMES = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "API_HASH", "2FA")

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    names = list(SECRET_ENV_NAMES) + list(redact_cfg.get("patterns", []))
    values = []
    for name in names:
        value = os.getenv(name)
        if value:
            values.append(value)
    telegram = settings.TELEGRAM
    for value in (telegram.api_hash, telegram.phone, telegram.two_factor_password):
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", True):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/spamguard.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _rule_set(config: GuardConfig) -> PatternRuleSet:
    if not config.patterns_file:
        return DEFAULT_RULE_SET
    path = config.patterns_file
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    LOGGER.info("Loading pattern table from %s", path)
    return load_rule_set(path)


def _build_ai(config: GuardConfig) -> Optional[AIClassifier]:
    """Select the AI backend once; absence of credentials is not an error."""

    if not config.use_ai:
        LOGGER.info("AI detection turned off, rule-based only")
        return None
    provider = select_provider(config.ai_provider, credentials_from_env(os.environ))
    backend = build_backend(provider, config)
    if backend is None:
        LOGGER.info("No AI provider configured, rule-based only")
        return None
    LOGGER.info("AI detection enabled via %s", provider.name)
    return AIClassifier(
        backend,
        timeout_seconds=config.ai_timeout_seconds,
        threshold=config.ai_confidence_threshold,
    )


def build_classifier(config: GuardConfig, gate: RateGate) -> tuple[SpamClassifier, Optional[AIClassifier]]:
    ai = _build_ai(config)
    classifier = SpamClassifier.build(
        keywords=config.custom_keywords,
        gate=gate,
        ai=ai,
        use_ai=config.use_ai,
        rule_set=_rule_set(config),
    )
    return classifier, ai


async def _close_ai(ai: Optional[AIClassifier]) -> None:
    if ai is not None:
        await ai.aclose()


def _run() -> None:
    _print_banner()
    _configure_logging()
    config = settings.GUARD

    LOGGER.info("Initializing spamguard")
    LOGGER.info("Mode: %s", "DRY RUN (no deletions)" if config.dry_run else "LIVE (will delete spam)")

    gate = RateGate(config.max_checks_per_window, config.window_ms)
    classifier, ai = build_classifier(config, gate)
    LOGGER.info("%s custom keywords are loaded", len(config.custom_keywords))

    client = build_client(settings.TELEGRAM)

    async def _startup() -> ActingIdentity:
        await client.connect()
        identity = await authorize(client, settings.TELEGRAM)
        # The reset timer lives on the client's loop for the whole session.
        gate.start()
        return identity

    identity = client.loop.run_until_complete(_startup())
    processor = MessageProcessor(
        classifier=classifier,
        moderation=TelegramModerator(client, acting_user=identity.user_id),
        monitored_channels=config.monitored_channels,
        dry_run=config.dry_run,
        announce_removals=config.announce_removals,
    )

    # One handler for every new message; filtering happens in the processor.
    @client.on(events.NewMessage())
    async def handler(event) -> None:
        try:
            incoming = await build_incoming(event.message)
            await processor.handle(incoming)
        except Exception:
            LOGGER.exception("Error while processing message")

    client.start()
    LOGGER.info("Client connected. Listening for group messages...")
    try:
        client.run_until_disconnected()
    finally:
        client.loop.run_until_complete(gate.stop())
        client.loop.run_until_complete(_close_ai(ai))
        LOGGER.info("Shutting down")


async def _list_groups(client, monitored: frozenset[str], identity: ActingIdentity) -> None:
    moderator = TelegramModerator(client, acting_user=identity.user_id)
    groups = []
    async for dialog in client.iter_dialogs():
        if dialog.is_group:
            groups.append(dialog)

    print(f"\nFound {len(groups)} groups:")
    for dialog in groups:
        key = channel_key(dialog.id, getattr(dialog.entity, "username", None))
        watching = "M" if is_monitored(key, monitored) else " "
        admin = "A" if await moderator.is_privileged(dialog.id) else " "
        print(f"  {watching} {admin} {display_name(dialog.entity)} | {key}")
    print("\nM = Monitoring | A = Admin\n")


def _discover() -> None:
    _print_banner()
    client = build_client(settings.TELEGRAM)

    async def _run_discover() -> None:
        await client.connect()
        try:
            identity = await authorize(client, settings.TELEGRAM)
            print(f"Admin status is shown for {identity.display_name} (id {identity.user_id})")
            await _list_groups(client, settings.GUARD.monitored_channels, identity)
        finally:
            await client.disconnect()

    client.loop.run_until_complete(_run_discover())


def _login() -> None:
    _configure_logging()
    client = build_client(settings.TELEGRAM)

    async def _run_login() -> ActingIdentity:
        await client.connect()
        try:
            return await authorize(client, settings.TELEGRAM)
        finally:
            await client.disconnect()

    identity = client.loop.run_until_complete(_run_login())
    print(f"Logged in as {identity.display_name} (id {identity.user_id})")
    print(f"Session stored as {settings.TELEGRAM.session_name}.session")


def _check(text: str, use_ai: bool) -> None:
    _configure_logging()
    config = settings.GUARD
    if not use_ai:
        config = replace(config, use_ai=False)
    gate = RateGate(config.max_checks_per_window, config.window_ms)
    classifier, ai = build_classifier(config, gate)
    message = Message(text=text.strip(), sender_display_name="cli", channel_name="cli")

    async def _classify():
        try:
            return await classifier.classify(message)
        finally:
            await _close_ai(ai)

    print(format_verdict_line(asyncio.run(_classify())))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="spamguard")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the group moderator")
    subparsers.add_parser("login", help="Log in and store the session file")
    subparsers.add_parser("discover", help="List groups with monitoring and admin status")
    check = subparsers.add_parser("check", help="Classify a text offline and print the verdict")
    check.add_argument("text")
    check.add_argument("--ai", action="store_true", help="Allow the AI provider call")

    args = parser.parse_args(argv)
    if args.command == "login":
        _login()
        return
    if args.command == "discover":
        _discover()
        return
    if args.command == "check":
        _check(args.text, args.ai)
        return
    _run()


if __name__ == "__main__":
    main()
