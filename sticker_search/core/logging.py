"""Structured logging for the bot and the health endpoint.

Every log line passes through :func:`redact_secrets` before rendering, so
the admin secret and the Telegram credentials never reach the output even
if a caller logs them by mistake.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog

from sticker_search.core.config import settings

REDACTED = "[redacted]"

# Event fields that are dropped outright
SENSITIVE_KEYS = frozenset({"secret", "bot_token", "telegram_api_hash", "api_hash"})

# Bot API token shape: "<bot id>:<35 char key>"
_BOT_TOKEN_RE = re.compile(r"\b\d{6,}:[A-Za-z0-9_-]{30,}\b")


def _configured_secrets() -> list[str]:
    return [value for value in (settings.secret, settings.bot_token, settings.telegram_api_hash) if value]


def _scrub(value: str, secrets: list[str]) -> str:
    for secret in secrets:
        value = value.replace(secret, REDACTED)
    return _BOT_TOKEN_RE.sub(REDACTED, value)


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor masking credentials in every event field."""
    secrets = _configured_secrets()
    for key, value in list(event_dict.items()):
        if key in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, str):
            event_dict[key] = _scrub(value, secrets)
        elif isinstance(value, (list, tuple)):
            event_dict[key] = [_scrub(item, secrets) if isinstance(item, str) else item for item in value]
    return event_dict


def setup_logging() -> None:
    """Configure structlog and the stdlib loggers it writes through."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.debug:
        renderers: list[Any] = [
            redact_secrets,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        # Tracebacks are rendered to text first so they are scrubbed too
        renderers = [
            structlog.processors.format_exc_info,
            redact_secrets,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    # Telethon logs every reconnect at INFO
    logging.getLogger("telethon").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("uvicorn.access").setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, usually with the module's ``__name__``."""
    return structlog.get_logger(name)
