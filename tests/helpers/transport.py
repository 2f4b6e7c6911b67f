"""Shared client builders for transport tests."""

from collections.abc import Callable

import httpx

from winnipeg_transit.transport.client import TransitClient
from winnipeg_transit.transport.config import ClientConfig


TEST_API_KEY = "test-api-key"

# Non-empty base path so that absolute endpoint paths would be caught.
TEST_BASE_URL = "https://transit.test/v3/"

Handler = Callable[[httpx.Request], httpx.Response]


def make_config(
    base_url: str = TEST_BASE_URL,
    api_key: str = TEST_API_KEY,
    user_agent: str = "winnipeg-transit-py",
) -> ClientConfig:
    """Build a client configuration for tests."""
    return ClientConfig(api_key=api_key, base_url=base_url, user_agent=user_agent)


def make_client(handler: Handler, config: ClientConfig | None = None) -> TransitClient:
    """Build a client whose requests are answered by handler.

    Args:
        handler: Function mapping a request to a canned response.
        config: Optional configuration; defaults to make_config().

    Returns:
        TransitClient wired to an httpx.MockTransport.
    """
    http_client = httpx.Client(
        transport=httpx.MockTransport(handler),
        follow_redirects=True,
    )
    return TransitClient(config or make_config(), http_client=http_client)
