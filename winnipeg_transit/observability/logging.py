"""Structured logging configuration."""

import logging
import re
import sys
from typing import TextIO

import structlog

from winnipeg_transit.transport.constants import API_KEY_PARAM, REDACTED_API_KEY


# Matches the api-key query parameter anywhere in a rendered string
_API_KEY_PATTERN = re.compile(rf"({re.escape(API_KEY_PARAM)}=)[^&\s\"']+")


def scrub_api_key(
    _logger: object,
    _method_name: str,
    event_dict: structlog.typing.EventDict,
) -> structlog.typing.EventDict:
    """Replace api-key query values in string log fields.

    Last line of defence for URLs that reach a log call unsanitized.
    """
    for key, value in event_dict.items():
        if isinstance(value, str) and API_KEY_PARAM in value:
            event_dict[key] = _API_KEY_PATTERN.sub(rf"\g<1>{REDACTED_API_KEY}", value)
    return event_dict


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON or console output, standard processors for
    timestamps and log levels, and API key scrubbing.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        scrub_api_key,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # httpx logs full request URLs at INFO; keep them out of the output.
    logging.basicConfig(format="%(message)s", stream=output, level=level)
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance.

    Args:
        name: Optional logger name.

    Returns:
        Bound logger instance.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_command_context(command: str) -> None:
    """Bind the running CLI command to all subsequent log messages."""
    structlog.contextvars.bind_contextvars(command=command)


def clear_command_context() -> None:
    """Clear command context from log messages."""
    structlog.contextvars.unbind_contextvars("command")
