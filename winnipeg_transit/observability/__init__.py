"""Observability module for logging."""

from winnipeg_transit.observability.logging import (
    bind_command_context,
    clear_command_context,
    configure_logging,
    get_logger,
    scrub_api_key,
)


__all__ = [
    "bind_command_context",
    "clear_command_context",
    "configure_logging",
    "get_logger",
    "scrub_api_key",
]
