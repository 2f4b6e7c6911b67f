"""Configuration model for the transit API client."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from winnipeg_transit.transport.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_DISPATCH_WORKERS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class ClientConfig(BaseModel):
    """Immutable configuration shared by every request of a client.

    The base URL must end with a path separator; this is checked when a
    request is built so that a misconfigured client fails before any
    network activity.

    max_dispatch_workers bounds the concurrent round-trips and body reads of
    one client. A call abandoned by its context holds its worker until the
    per-request httpx timeout (at most timeout_seconds) expires, so further
    calls queue once that many abandoned calls are outstanding.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: SecretStr
    base_url: Annotated[str, Field(min_length=1)] = DEFAULT_BASE_URL
    user_agent: Annotated[str, Field(max_length=500)] = DEFAULT_USER_AGENT
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_dispatch_workers: Annotated[int, Field(ge=1, le=256)] = (
        DEFAULT_MAX_DISPATCH_WORKERS
    )
