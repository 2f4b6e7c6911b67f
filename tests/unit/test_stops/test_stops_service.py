"""Unit tests for the stops endpoint wrapper."""

import httpx
import pytest

from tests.helpers.transport import TEST_API_KEY, make_client
from winnipeg_transit.stops.models import Stop, StopList
from winnipeg_transit.transport.context import RequestContext
from winnipeg_transit.transport.errors import ErrorResponse, MissingContextError


STOPS_PAYLOAD = {
    "stops": [
        {
            "key": 10064,
            "name": "Northbound Main at William",
            "number": 10064,
            "direction": "Northbound",
            "side": "Farside",
            "street": {"key": 2265, "name": "Main Street", "type": "Street"},
            "cross-street": {"key": 3958, "name": "William Avenue", "type": "Avenue"},
            "centre": {
                "utm": {"zone": "14U", "x": 633512, "y": 5529296},
                "geographic": {"latitude": "49.90018", "longitude": "-97.13794"},
            },
            "distances": {"direct": "57.17"},
        }
    ],
    "query-time": "2024-05-01T10:15:00",
}


class TestStopsSearch:
    """Tests for StopsService.search."""

    def test_search_builds_escaped_path(self) -> None:
        """The stops:<query> segment is percent-encoded under the base path."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=STOPS_PAYLOAD)

        client = make_client(handler)

        stops, resp = client.stops.search(RequestContext.background(), "main st")

        assert resp.status_code == 200
        assert seen[0].url.raw_path.startswith(b"/v3/stops%3Amain%20st.json?")
        assert seen[0].url.params["api-key"] == TEST_API_KEY
        assert len(stops) == 1

    def test_search_decodes_stops(self) -> None:
        """Kebab-case keys map onto the models."""
        client = make_client(lambda r: httpx.Response(200, json=STOPS_PAYLOAD))

        stops, _ = client.stops.search(RequestContext.background(), "main")

        stop = stops[0]
        assert isinstance(stop, Stop)
        assert stop.number == 10064
        assert stop.cross_street.name == "William Avenue"
        assert stop.centre.geographic.latitude == "49.90018"
        assert stop.centre.utm.zone == "14U"

    def test_search_empty_body(self) -> None:
        """An empty body yields no stops rather than an error."""
        client = make_client(lambda r: httpx.Response(204))

        stops, resp = client.stops.search(RequestContext.background(), "main")

        assert stops == []
        assert resp.status_code == 204

    def test_search_error_propagates(self) -> None:
        """API errors reach the caller with the response attached."""
        client = make_client(
            lambda r: httpx.Response(400, json={"responseText": "bad query"})
        )

        with pytest.raises(ErrorResponse) as exc_info:
            client.stops.search(RequestContext.background(), "")

        assert exc_info.value.message == "bad query"
        assert TEST_API_KEY not in str(exc_info.value)

    def test_search_requires_context(self) -> None:
        """A missing context fails before any request is sent."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        client = make_client(handler)

        with pytest.raises(MissingContextError):
            client.stops.search(None, "main")  # type: ignore[arg-type]

        assert calls == []


class TestStopsNearby:
    """Tests for StopsService.nearby."""

    def test_nearby_params(self) -> None:
        """Location filters are sent as query parameters."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=STOPS_PAYLOAD)

        client = make_client(handler)

        stops, _ = client.stops.nearby(
            RequestContext.background(), 49.895, -97.138, distance=250, walking=True
        )

        params = seen[0].url.params
        assert seen[0].url.path == "/v3/stops.json"
        assert params["lat"] == "49.895"
        assert params["lon"] == "-97.138"
        assert params["distance"] == "250"
        assert params["walking"] == "true"
        assert params["api-key"] == TEST_API_KEY
        assert stops[0].name == "Northbound Main at William"

    def test_nearby_optional_params_omitted(self) -> None:
        """distance and walking are left out by default."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"stops": []})

        client = make_client(handler)

        stops, _ = client.stops.nearby(RequestContext.background(), 49.9, -97.1)

        assert stops == []
        assert "distance" not in seen[0].url.params
        assert "walking" not in seen[0].url.params


class TestStopsService:
    """Tests for service wiring."""

    def test_service_cached_on_client(self) -> None:
        """client.stops returns the same service each time."""
        client = make_client(lambda r: httpx.Response(200))

        assert client.stops is client.stops


class TestStopList:
    """Tests for StopList model."""

    def test_query_time_alias(self) -> None:
        """query-time maps to query_time."""
        stop_list = StopList.model_validate(STOPS_PAYLOAD)

        assert stop_list.query_time == "2024-05-01T10:15:00"
        assert len(stop_list.items) == 1

    def test_defaults(self) -> None:
        """Missing fields fall back to zero values."""
        stop = Stop.model_validate({"key": 1})

        assert stop.name == ""
        assert stop.street.key == 0
        assert stop.centre.utm.x == 0

    def test_dump_by_alias(self) -> None:
        """Dumping by alias restores the API's key names."""
        stop = StopList.model_validate(STOPS_PAYLOAD).items[0]

        data = stop.model_dump(by_alias=True)

        assert "cross-street" in data
