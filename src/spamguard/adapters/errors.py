"""Adapter-level exceptions."""

from __future__ import annotations


class ProviderResponseError(RuntimeError):
    """The provider answered, but not in the documented response shape."""
