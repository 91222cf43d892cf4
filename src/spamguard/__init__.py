"""spamguard: spam moderation for Telegram group chats."""

__version__ = "0.1.0"
