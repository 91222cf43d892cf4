"""Integration adapters (Telegram transport, AI provider backends)."""
