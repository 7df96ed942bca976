"""
Structured logging configuration using structlog.

Log records carry Datadog-compatible field names so sync traffic from the
command centre and portal requests can be correlated in one place.

Usage:
    from apps.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("sync_case_applied", case_id="...", person_id="...")

Field naming follows Datadog standard attributes:
    - trace_id: Request correlation ID (from X-Request-ID or generated)
    - usr.id / usr.email: Signed-in portal account
    - http.method, http.url_details.path, http.status_code
    - duration: Request duration in nanoseconds

Secrets (API keys, session tokens, invite tokens) are masked before
rendering; see _redact_secrets.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

# Event keys whose values must never reach log output
SECRET_FIELDS = frozenset(
    {
        "api_key",
        "x-api-key",
        "authorization",
        "session_jwt",
        "token",
        "secret",
    }
)

REDACTED = "[redacted]"


def _convert_duration_to_nanoseconds(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Convert duration_ms to duration (nanoseconds) as Datadog expects."""
    if "duration_ms" in event_dict:
        duration_ms = event_dict.pop("duration_ms")
        event_dict["duration"] = int(duration_ms * 1_000_000)
    return event_dict


def _redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask values of known secret-bearing keys."""
    for key in list(event_dict):
        if key.lower() in SECRET_FIELDS and event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def _mask_email_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Keep only the first character of the local part of logged email addresses.

    Applies to keys ending in "email" (usr.email, person_email, ...). Client
    emails identify healthcare applicants and stay out of log storage.
    """
    for key, value in event_dict.items():
        if key.lower().endswith("email") and isinstance(value, str) and "@" in value:
            local, _, domain = value.partition("@")
            event_dict[key] = f"{local[:1]}***@{domain}"
    return event_dict


def configure_logging(json_format: bool = True, log_level: str = "INFO") -> None:
    """
    Configure structlog for the application.

    Uses stdlib integration so Django's and third-party loggers share the
    same renderer.

    Args:
        json_format: If True, output JSON (production). If False, console output.
        log_level: Minimum log level to output.
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _convert_duration_to_nanoseconds,
        _redact_secrets,
        _mask_email_fields,
    ]

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
        pre_chain.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module, usually called with __name__."""
    return structlog.get_logger(name)


def bind_contextvars(**kwargs: Any) -> None:
    """Add fields to every log line for the rest of the request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_contextvars() -> None:
    """Drop request-scoped log fields."""
    structlog.contextvars.clear_contextvars()
