"""Client library for the Winnipeg Transit API."""

from winnipeg_transit.transport import (
    ClientConfig,
    ErrorResponse,
    RawSink,
    RequestContext,
    StructuredTarget,
    TransitClient,
    TransitError,
)


__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ErrorResponse",
    "RawSink",
    "RequestContext",
    "StructuredTarget",
    "TransitClient",
    "TransitError",
]
