"""Core domain package for spamguard.

Core contains the spam classification cascade (keywords, pattern rules, AI
adapter, rate gate) and the moderation policy without any Telegram or HTTP
specific code, keeping the decision logic portable.
"""
