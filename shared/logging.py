"""
Structured logging for the verification service.

Provides:
- setup_logging(): configure stdlib logging + structlog from LoggingSettings
- get_logger(): get a structlog logger bound to a module name
- hash_ip(): hash client IP addresses before they reach production logs

Production uses JSON output, development a coloured console renderer;
LOG_FORMAT overrides either.
Token, secret and key values are redacted by a processor so verifier
payloads can be logged without leaking credentials.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

from config import LoggingSettings

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "token",
    "private_access_token",
    "recaptcha_token",
    "secret",
    "api_key",
    "authorization",
    "cookie",
    "password",
}
_SENSITIVE_FRAGMENTS = ("token", "secret", "password", "key")
_PRESERVED_KEYS = {"level", "event", "timestamp", "logger", "key_id"}

_production = False


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """
    Hash an IP address for privacy in production.

    In production, returns SHA-256 hash (first 16 chars).
    In development, returns the original IP for easier debugging.
    """
    if ip_address is None:
        return None
    if _production and ip_address:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        lowered = key.lower()
        if lowered in _PRESERVED_KEYS:
            continue
        if lowered in REDACTED_FIELDS or any(
            fragment in lowered for fragment in _SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(settings: LoggingSettings) -> None:
    """
    Configure structlog with appropriate processors for the environment.

    Production: JSON formatting for easy parsing
    Development: Pretty console formatting with colors
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if settings.output_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(settings: LoggingSettings) -> None:
    """Route stdlib logging to stdout at the configured level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Initialize logging for the application.

    Should be called once during application startup (in create_app).
    """
    global _production

    if settings is None:
        settings = LoggingSettings()
    _production = settings.is_production

    configure_stdlib_logging(settings)
    configure_structlog(settings)

    get_logger(__name__).info(
        "logging_initialized",
        env=settings.env,
        log_level=settings.log_level,
        log_format=settings.output_format,
    )


def get_logger(name: str) -> BoundLogger:
    """
    Get a logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("human_verification_succeeded", method="recaptcha")
    """
    return structlog.get_logger(name)


__all__ = [
    "get_logger",
    "hash_ip",
    "setup_logging",
    "configure_structlog",
    "redact_sensitive_fields",
]
