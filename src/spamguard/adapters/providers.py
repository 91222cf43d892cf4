"""AI provider selection.

The active backend is chosen once at startup from the supplied credentials
and an explicit preference; the rest of the app never looks at its identity.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from spamguard.adapters.anthropic_backend import AnthropicBackend
from spamguard.adapters.openai_backend import OpenAIBackend
from spamguard.core.config import AI_PREFERENCES, AI_PROVIDERS, GuardConfig, ProviderConfig
from spamguard.core.ports import ClassifierBackend

LOGGER = logging.getLogger(__name__)

CREDENTIAL_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def select_provider(preference: str, credentials: Mapping[str, Optional[str]]) -> ProviderConfig:
    """Preferred provider if it has a credential, else the first that does.

    ``credentials`` maps provider name to its (opaque) key; only presence is
    checked.
    """

    if preference not in AI_PREFERENCES:
        raise ValueError(f"ai_provider must be one of {', '.join(AI_PREFERENCES)}, got {preference!r}")
    if preference == "disabled":
        return ProviderConfig(name=None)

    available = [name for name in AI_PROVIDERS if credentials.get(name)]
    if preference in available:
        return ProviderConfig(name=preference, api_key=credentials[preference])
    if preference != "auto":
        LOGGER.warning("Preferred AI provider %s has no credential, trying others", preference)
    if available:
        name = available[0]
        return ProviderConfig(name=name, api_key=credentials[name])
    return ProviderConfig(name=None)


def credentials_from_env(environ: Mapping[str, str]) -> dict[str, Optional[str]]:
    return {name: environ.get(variable) or None for name, variable in CREDENTIAL_ENV.items()}


def build_backend(provider: ProviderConfig, config: GuardConfig) -> Optional[ClassifierBackend]:
    """Instantiate the backend for a selected provider, or None when disabled."""

    if not provider.enabled:
        return None
    if provider.name == "anthropic":
        return AnthropicBackend(
            api_key=provider.api_key,
            model=config.anthropic_model,
            timeout_seconds=config.ai_timeout_seconds,
        )
    if provider.name == "openai":
        return OpenAIBackend(
            api_key=provider.api_key,
            model=config.openai_model,
            base_url=config.openai_base_url,
            timeout_seconds=config.ai_timeout_seconds,
        )
    raise ValueError(f"Unsupported AI provider: {provider.name}")
