"""Telegram sticker tagging and inline search bot."""
