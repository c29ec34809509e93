"""Logging configuration using structlog."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from pydantic import SecretStr

from playwise.config.settings import Settings, get_settings

REDACTED = "**********"

# Substrings of event keys whose values are never written to the log
SENSITIVE_KEYS = ("password", "passwd", "token", "secret", "authorization", "cookie", "api_key")


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credentials before an event is rendered.

    Values that are ``SecretStr`` and values bound under a credential-like
    key (``password``, ``auth_token``, ``Cookie``...) are replaced with
    ``REDACTED``. The event name itself is left alone.
    """
    for key, value in event_dict.items():
        if key == "event":
            continue
        if isinstance(value, SecretStr) or any(
            marker in key.lower() for marker in SENSITIVE_KEYS
        ):
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the harness."""
    settings = settings or get_settings()

    log_level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            # Use JSON for CI runs, pretty print in debug
            structlog.dev.ConsoleRenderer()
            if settings.debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Playwright and asyncio log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
