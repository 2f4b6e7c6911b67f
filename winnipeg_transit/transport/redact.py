"""Credential redaction utilities for logging and error reporting."""

from collections.abc import Mapping
from typing import overload

import httpx

from winnipeg_transit.transport.constants import API_KEY_PARAM, REDACTED_API_KEY


# Headers that must never appear in logs
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "x-api-key",
        "x-auth-token",
        "proxy-authorization",
        "set-cookie",
    }
)

REDACTED_VALUE = "[REDACTED]"


@overload
def sanitize_url(url: None) -> None: ...
@overload
def sanitize_url(url: str) -> str: ...
@overload
def sanitize_url(url: httpx.URL) -> httpx.URL: ...


def sanitize_url(url: str | httpx.URL | None) -> str | httpx.URL | None:
    """Redact the api-key query parameter from a URL.

    The parameter keeps its position; every other parameter is left as is.
    URLs without a non-empty api-key are returned unchanged.

    Args:
        url: URL that may carry the API key, or None.

    Returns:
        URL of the same type with the key replaced by REDACTED.
    """
    if url is None:
        return None

    parsed = url if isinstance(url, httpx.URL) else httpx.URL(url)
    if not parsed.params.get(API_KEY_PARAM):
        return url

    redacted = parsed.copy_set_param(API_KEY_PARAM, REDACTED_API_KEY)
    if isinstance(url, httpx.URL):
        return redacted
    return str(redacted)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Redact sensitive headers for logging.

    Args:
        headers: Original headers mapping.

    Returns:
        New dictionary with sensitive values redacted.
    """
    result: dict[str, str] = {}
    for key, value in headers.items():
        if is_sensitive_header(key):
            result[key] = REDACTED_VALUE
        else:
            result[key] = value
    return result


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name is sensitive."""
    return header_name.lower() in SENSITIVE_HEADERS
