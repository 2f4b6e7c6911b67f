"""Data models for the transport layer."""

from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

import httpx
from pydantic import TypeAdapter

from winnipeg_transit.transport.context import RequestContext


T = TypeVar("T")


class BinaryWriter(Protocol):
    """Anything that accepts raw bytes, such as a file or BytesIO."""

    def write(self, data: bytes, /) -> Any: ...


@dataclass(frozen=True)
class ApiRequest:
    """A single API request, built fresh per call and never reused.

    Attributes:
        context: Cancellation/deadline signal for the round-trip.
        method: HTTP method.
        url: Absolute request URL including the api-key parameter.
        headers: Request headers.
    """

    context: RequestContext
    method: str
    url: httpx.URL
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class RawSink:
    """Decode target that receives the undecoded response body.

    Attributes:
        writer: Destination for the body bytes.
        bytes_written: Number of bytes copied so far.
    """

    writer: BinaryWriter
    bytes_written: int = 0

    def write(self, chunk: bytes) -> None:
        """Copy a chunk of the body into the writer."""
        self.writer.write(chunk)
        self.bytes_written += len(chunk)


class StructuredTarget(Generic[T]):
    """Decode target that validates the JSON body into a type.

    The decoded value is stored in ``value``. An empty body leaves
    ``value`` at its initial value.
    """

    def __init__(self, target_type: type[T] | Any, initial: T | None = None) -> None:
        """Initialize the target.

        Args:
            target_type: Type understood by pydantic (model, list, dict, Any).
            initial: Value kept when the body is empty.
        """
        self.target_type = target_type
        self.value: T | None = initial
        self._adapter: TypeAdapter[T] = TypeAdapter(target_type)

    def decode(self, body: bytes) -> None:
        """Validate a JSON body and store the result.

        Raises:
            pydantic.ValidationError: If the body is malformed or mismatched.
        """
        self.value = self._adapter.validate_json(body)

    def __repr__(self) -> str:
        return f"StructuredTarget({self.target_type!r}, value={self.value!r})"


DecodeTarget = RawSink | StructuredTarget[Any]
