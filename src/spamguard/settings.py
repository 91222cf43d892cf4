"""Static configuration for spamguard.

Non-secret settings (monitored groups, keywords, AI and rate options,
logging) live in a single JSON file for quick edits without touching Python.
Credentials and a few overrides come from the environment (.env supported).
"""

from __future__ import annotations

import json
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from spamguard.core.channel_keys import expand_monitored
from spamguard.core.config import AI_PREFERENCES, GuardConfig, TelegramSettings

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

CONFIG_PATH = os.environ.get("SPAMGUARD_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))

_PROVIDER_ALIASES = {
    "provider-a": "anthropic",
    "claude": "anthropic",
    "provider-b": "openai",
    "none": "disabled",
    "off": "disabled",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _load_json_config(path: str = CONFIG_PATH) -> dict:
    """Load config.json; a missing file means all defaults."""

    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return data


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _split_list(value: Any) -> list[str]:
    # Env values are comma separated, JSON values are lists.
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in value or [] if str(item).strip()]


def _positive_int(value: Any, name: str) -> int:
    number = int(value)
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return number


def normalize_provider(value: str) -> str:
    name = str(value).strip().lower()
    name = _PROVIDER_ALIASES.get(name, name)
    if name not in AI_PREFERENCES:
        raise ValueError(f"ai_provider must be one of {', '.join(AI_PREFERENCES)}, got {value!r}")
    return name


def build_guard_config(raw: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> GuardConfig:
    """Merge config.json values with environment overrides into a GuardConfig.

    Environment names follow the original tool: AI_PROVIDER, USE_AI, DRY_RUN,
    MONITORED_GROUPS and SPAM_KEYWORDS (comma separated lists).
    """

    environ = environ if environ is not None else {}
    defaults = GuardConfig()

    def pick(key: str, env_name: Optional[str] = None) -> Any:
        if env_name and environ.get(env_name):
            return environ[env_name]
        return raw.get(key, getattr(defaults, key))

    threshold = int(pick("ai_confidence_threshold"))
    if not 0 <= threshold <= 100:
        raise ValueError(f"ai_confidence_threshold must be in 0-100, got {threshold}")
    timeout = float(pick("ai_timeout_seconds"))
    if timeout <= 0:
        raise ValueError(f"ai_timeout_seconds must be positive, got {timeout}")

    return GuardConfig(
        ai_provider=normalize_provider(pick("ai_provider", "AI_PROVIDER")),
        use_ai=_parse_bool(pick("use_ai", "USE_AI"), "use_ai"),
        dry_run=_parse_bool(pick("dry_run", "DRY_RUN"), "dry_run"),
        monitored_channels=expand_monitored(_split_list(pick("monitored_channels", "MONITORED_GROUPS"))),
        custom_keywords=tuple(_split_list(pick("custom_keywords", "SPAM_KEYWORDS"))),
        max_checks_per_window=_positive_int(pick("max_checks_per_window"), "max_checks_per_window"),
        window_ms=_positive_int(pick("window_ms"), "window_ms"),
        ai_timeout_seconds=timeout,
        ai_confidence_threshold=threshold,
        announce_removals=_parse_bool(pick("announce_removals"), "announce_removals"),
        patterns_file=pick("patterns_file") or None,
        anthropic_model=str(pick("anthropic_model")),
        openai_model=str(pick("openai_model")),
        openai_base_url=str(pick("openai_base_url")),
    )


_LOGIN_METHODS = {"qr", "phone"}


def build_telegram_settings(
    raw: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None
) -> TelegramSettings:
    """Read the "telegram" section of config.json; secrets come from the environment.

    API_ID, API_HASH, SESSION_NAME, LOGIN_METHOD, PHONE and 2FA override the
    file. Missing credentials are not an error here: commands that need a
    Telegram session fail when they build the client.
    """

    environ = environ if environ is not None else {}
    section = raw.get("telegram") or {}
    defaults = TelegramSettings()

    def pick(key: str, env_name: str) -> Any:
        if environ.get(env_name):
            return environ[env_name]
        return section.get(key, getattr(defaults, key))

    api_id = pick("api_id", "API_ID")
    if api_id not in (None, ""):
        try:
            api_id = int(api_id)
        except (TypeError, ValueError):
            raise ValueError(f"API_ID must be an integer, got {api_id!r}") from None
    else:
        api_id = None

    login_method = pick("login_method", "LOGIN_METHOD")
    login_method = str(login_method).strip().lower() if login_method else None
    if login_method is not None and login_method not in _LOGIN_METHODS:
        raise ValueError(f"login_method must be qr or phone, got {login_method!r}")

    return TelegramSettings(
        api_id=api_id,
        api_hash=pick("api_hash", "API_HASH") or None,
        session_name=str(pick("session_name", "SESSION_NAME")),
        login_method=login_method,
        phone=pick("phone", "PHONE") or None,
        two_factor_password=environ.get("2FA") or None,
        qr_timeout_seconds=_positive_int(pick("qr_timeout_seconds", "QR_TIMEOUT_SECONDS"), "qr_timeout_seconds"),
    )


load_dotenv()

_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

GUARD = build_guard_config(_CONFIG, os.environ)

TELEGRAM = build_telegram_settings(_CONFIG, os.environ)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {"enabled": True})
