"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

AI_PROVIDERS = ("anthropic", "openai")
AI_PREFERENCES = ("auto",) + AI_PROVIDERS + ("disabled",)


@dataclass(frozen=True)
class ProviderConfig:
    """Which AI backend is active. ``name`` is None when AI is disabled."""

    name: Optional[str]
    api_key: Optional[str] = field(default=None, repr=False)

    @property
    def enabled(self) -> bool:
        return self.name is not None


@dataclass(frozen=True)
class GuardConfig:
    """Recognized options of the guard, fully defaulted."""

    ai_provider: str = "auto"
    use_ai: bool = True
    dry_run: bool = False
    monitored_channels: frozenset[str] = frozenset()
    custom_keywords: tuple[str, ...] = ()
    max_checks_per_window: int = 30
    window_ms: int = 60_000
    ai_timeout_seconds: float = 15.0
    ai_confidence_threshold: int = 70
    announce_removals: bool = False
    patterns_file: Optional[str] = None
    anthropic_model: str = "claude-haiku-4-5"
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"


@dataclass(frozen=True)
class TelegramSettings:
    """Telegram account credentials and login options."""

    api_id: Optional[int] = None
    api_hash: Optional[str] = field(default=None, repr=False)
    session_name: str = "spamguard"
    login_method: Optional[str] = None
    phone: Optional[str] = field(default=None, repr=False)
    two_factor_password: Optional[str] = field(default=None, repr=False)
    qr_timeout_seconds: int = 120

    @property
    def has_credentials(self) -> bool:
        return self.api_id is not None and bool(self.api_hash)
