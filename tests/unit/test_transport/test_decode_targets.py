"""Unit tests for decode targets."""

import io

import pytest
from pydantic import BaseModel, ValidationError

from winnipeg_transit.transport.models import RawSink, StructuredTarget


class Point(BaseModel):
    """Structured payload."""

    x: int
    y: int


class TestStructuredTarget:
    """Tests for StructuredTarget."""

    def test_initial_value_none(self) -> None:
        """The value starts as None unless given."""
        assert StructuredTarget(Point).value is None

    def test_decode_sets_value(self) -> None:
        """decode() validates JSON into the target type."""
        target = StructuredTarget(Point)

        target.decode(b'{"x": 1, "y": 2}')

        assert target.value == Point(x=1, y=2)

    def test_decode_invalid_raises(self) -> None:
        """Invalid JSON raises a pydantic ValidationError."""
        target = StructuredTarget(Point)

        with pytest.raises(ValidationError):
            target.decode(b"{nope")

        assert target.value is None

    def test_list_target(self) -> None:
        """Container types are supported."""
        target: StructuredTarget[list[int]] = StructuredTarget(list[int])

        target.decode(b"[1, 2, 3]")

        assert target.value == [1, 2, 3]


class TestRawSink:
    """Tests for RawSink."""

    def test_write_counts_bytes(self) -> None:
        """Chunks are forwarded and counted."""
        buffer = io.BytesIO()
        sink = RawSink(buffer)

        sink.write(b"abc")
        sink.write(b"de")

        assert buffer.getvalue() == b"abcde"
        assert sink.bytes_written == 5
