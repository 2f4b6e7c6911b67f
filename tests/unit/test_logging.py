"""Unit tests for logging configuration and API key scrubbing."""

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog

from winnipeg_transit.observability.logging import (
    bind_command_context,
    clear_command_context,
    configure_logging,
    get_logger,
    scrub_api_key,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None]:
    """Restore structlog defaults after each test."""
    yield
    clear_command_context()
    structlog.reset_defaults()


class TestScrubApiKey:
    """Tests for the scrub_api_key processor."""

    def test_scrubs_url_fields(self) -> None:
        """api-key values in string fields are replaced."""
        event = {
            "event": "request_failed",
            "url": "https://api.test/v3/stops.json?lat=1&api-key=KEY123",
        }

        result = scrub_api_key(None, "info", event)

        assert result["url"] == "https://api.test/v3/stops.json?lat=1&api-key=REDACTED"

    def test_leaves_other_fields(self) -> None:
        """Non-string and unrelated fields pass through."""
        event = {"event": "dispatch_complete", "status_code": 200, "url": "/x?a=b"}

        result = scrub_api_key(None, "info", event)

        assert result == {"event": "dispatch_complete", "status_code": 200, "url": "/x?a=b"}

    def test_scrubs_inside_messages(self) -> None:
        """Keys embedded in free text are also replaced."""
        event = {"event": "x", "error": "GET /s.json?api-key=abc failed"}

        result = scrub_api_key(None, "info", event)

        assert result["error"] == "GET /s.json?api-key=REDACTED failed"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_is_scrubbed(self) -> None:
        """JSON log lines never carry a raw key."""
        output = io.StringIO()
        configure_logging(level=logging.DEBUG, output=output, json_format=True)

        get_logger().info("probe", url="https://api.test/?api-key=KEY123")

        line = json.loads(output.getvalue().strip().splitlines()[-1])
        assert line["event"] == "probe"
        assert line["url"] == "https://api.test/?api-key=REDACTED"
        assert line["level"] == "info"

    def test_level_filtering(self) -> None:
        """Messages below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output, json_format=True)

        get_logger().info("hidden")

        assert output.getvalue() == ""

    def test_command_context_bound(self) -> None:
        """bind_command_context adds the command to every event."""
        output = io.StringIO()
        configure_logging(level=logging.INFO, output=output, json_format=True)

        bind_command_context("stops-search")
        get_logger().info("probe")

        line = json.loads(output.getvalue().strip().splitlines()[-1])
        assert line["command"] == "stops-search"
