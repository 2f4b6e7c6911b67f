"""Request/response transport for the Winnipeg Transit API.

This module provides:
- Request construction relative to a versioned base URL
- Single round-trip dispatch with cancellation and deadlines
- Status checking and JSON decoding into typed targets
- Credential redaction for every surfaced URL
- Metrics collection for observability
"""

from winnipeg_transit.transport.client import (
    TransitClient,
    check_response,
    drain_and_close,
)
from winnipeg_transit.transport.config import ClientConfig
from winnipeg_transit.transport.constants import (
    API_KEY_PARAM,
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    JSON_SUFFIX,
    MAX_BODY_SLURP_SIZE,
    REDACTED_API_KEY,
)
from winnipeg_transit.transport.context import RequestContext
from winnipeg_transit.transport.errors import (
    ConfigurationError,
    ContextCanceledError,
    DeadlineExceededError,
    ErrorResponse,
    MissingContextError,
    RequestCancelledError,
    RequestPathError,
    ResponseDecodeError,
    TransitError,
    TransitErrorClass,
    TransportError,
)
from winnipeg_transit.transport.metrics import DispatchMetrics
from winnipeg_transit.transport.models import (
    ApiRequest,
    DecodeTarget,
    RawSink,
    StructuredTarget,
)
from winnipeg_transit.transport.redact import redact_headers, sanitize_url
from winnipeg_transit.transport.state_machine import (
    RequestState,
    RequestStateMachine,
    RequestStateTransitionError,
)


__all__ = [
    # Client
    "TransitClient",
    "check_response",
    "drain_and_close",
    # Config
    "ClientConfig",
    "RequestContext",
    # Models
    "ApiRequest",
    "DecodeTarget",
    "RawSink",
    "StructuredTarget",
    # Errors
    "TransitError",
    "TransitErrorClass",
    "ConfigurationError",
    "MissingContextError",
    "RequestPathError",
    "RequestCancelledError",
    "ContextCanceledError",
    "DeadlineExceededError",
    "TransportError",
    "ErrorResponse",
    "ResponseDecodeError",
    # State machine
    "RequestState",
    "RequestStateMachine",
    "RequestStateTransitionError",
    # Constants
    "API_KEY_PARAM",
    "DEFAULT_BASE_URL",
    "DEFAULT_USER_AGENT",
    "JSON_SUFFIX",
    "MAX_BODY_SLURP_SIZE",
    "REDACTED_API_KEY",
    # Metrics
    "DispatchMetrics",
    # Redaction
    "redact_headers",
    "sanitize_url",
]
