"""Error types for the transport layer."""

from enum import Enum

import httpx
from pydantic import BaseModel, ConfigDict, Field

from winnipeg_transit.transport.redact import sanitize_url


class TransitErrorClass(str, Enum):
    """Classification of transport errors.

    - CONFIGURATION: Client misconfiguration detected before any network call
    - CALLER: Invalid arguments from the caller (missing context, bad path)
    - CANCELLED: Request context canceled or deadline exceeded
    - TRANSPORT: Network, DNS, TLS, or redirect failure
    - STATUS: Non-2xx HTTP response
    - DECODE: Malformed response body for a structured target
    """

    CONFIGURATION = "CONFIGURATION"
    CALLER = "CALLER"
    CANCELLED = "CANCELLED"
    TRANSPORT = "TRANSPORT"
    STATUS = "STATUS"
    DECODE = "DECODE"


class TransitError(Exception):
    """Base exception for transit client errors.

    Provides structured error information for logging.
    """

    error_class: TransitErrorClass = TransitErrorClass.TRANSPORT

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message. Must not carry the API key.
        """
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": str(self),
        }


class ConfigurationError(TransitError):
    """Raised when the client configuration cannot produce a valid request."""

    error_class = TransitErrorClass.CONFIGURATION


class MissingContextError(TransitError):
    """Raised when a request is built without a context."""

    error_class = TransitErrorClass.CALLER

    def __init__(self) -> None:
        super().__init__("context must be non-nil")


class RequestPathError(TransitError):
    """Raised when a relative path is absolute or cannot be resolved."""

    error_class = TransitErrorClass.CALLER

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class RequestCancelledError(TransitError):
    """Raised when the request context finished before the round-trip did."""

    error_class = TransitErrorClass.CANCELLED


class ContextCanceledError(RequestCancelledError):
    """The request context was canceled."""

    def __init__(self) -> None:
        super().__init__("context canceled")


class DeadlineExceededError(RequestCancelledError):
    """The request context deadline passed."""

    def __init__(self) -> None:
        super().__init__("context deadline exceeded")


class TransportError(TransitError):
    """Network-level failure with the credential removed from its URL."""

    error_class = TransitErrorClass.TRANSPORT

    def __init__(self, message: str, method: str, url: str | None) -> None:
        """Initialize the transport error.

        Args:
            message: Sanitized description of the failure.
            method: HTTP method of the failed request.
            url: Sanitized request URL, if known.
        """
        super().__init__(message)
        self.method = method
        self.url = url

    def __str__(self) -> str:
        if self.url is None:
            return self.message
        return f"{self.method} {self.url}: {self.message}"

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging/serialization."""
        data = super().to_dict()
        data["method"] = self.method
        data["url"] = self.url
        return data


class ErrorBody(BaseModel):
    """Error payload returned by the API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message: str = Field(default="", alias="responseText")


class ErrorResponse(TransitError):
    """Reports an error caused by a non-2xx API response.

    The originating response stays attached so callers can inspect
    status and headers.
    """

    error_class = TransitErrorClass.STATUS

    def __init__(self, response: httpx.Response, message: str = "") -> None:
        """Initialize the error response.

        Args:
            response: HTTP response that caused this error.
            message: Server-supplied error message, empty if undecodable.
        """
        self.response = response
        super().__init__(message)

    @property
    def method(self) -> str:
        """HTTP method of the originating request."""
        return self.response.request.method

    @property
    def url(self) -> str:
        """Sanitized URL of the originating request."""
        return str(sanitize_url(self.response.request.url))

    @property
    def status_code(self) -> int:
        """HTTP status code of the response."""
        return self.response.status_code

    def __str__(self) -> str:
        return f"{self.method} {self.url}: {self.status_code} {self.message}"

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging/serialization."""
        data = super().to_dict()
        data["method"] = self.method
        data["url"] = self.url
        data["status_code"] = self.status_code
        return data


class ResponseDecodeError(TransitError):
    """Raised when a 2xx body cannot be decoded into the requested target."""

    error_class = TransitErrorClass.DECODE

    def __init__(self, message: str, response: httpx.Response) -> None:
        super().__init__(message)
        self.response = response
