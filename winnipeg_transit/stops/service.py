"""Stop search and listing endpoints."""

from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
import structlog

from winnipeg_transit.stops.models import Stop, StopList
from winnipeg_transit.transport.context import RequestContext
from winnipeg_transit.transport.models import StructuredTarget


if TYPE_CHECKING:
    from winnipeg_transit.transport.client import TransitClient


logger = structlog.get_logger()


class StopsService:
    """Endpoint wrapper for ``/stops``.

    Builds paths and query parameters only; dispatch, decoding, and error
    handling belong to the client.
    """

    def __init__(self, client: "TransitClient") -> None:
        self._client = client
        self._log = logger.bind(component="stops")

    def search(
        self,
        ctx: RequestContext,
        query: str,
    ) -> tuple[list[Stop], httpx.Response]:
        """Search stops by free text.

        The whole ``stops:<query>`` segment is percent-encoded so that the
        colon is not read as a URL scheme.

        Args:
            ctx: Request context.
            query: Search text, e.g. a street name.

        Returns:
            Matching stops and the response they came from.
        """
        path = quote(f"stops:{query}", safe="")
        return self._list(ctx, path, params=None)

    def nearby(
        self,
        ctx: RequestContext,
        latitude: float,
        longitude: float,
        distance: int | None = None,
        walking: bool = False,
    ) -> tuple[list[Stop], httpx.Response]:
        """List stops around a point.

        Args:
            ctx: Request context.
            latitude: Latitude in decimal degrees.
            longitude: Longitude in decimal degrees.
            distance: Search radius in metres; server default if None.
            walking: Measure distance along walkable paths.

        Returns:
            Nearby stops and the response they came from.
        """
        params: dict[str, str | int | float | bool] = {
            "lat": latitude,
            "lon": longitude,
        }
        if distance is not None:
            params["distance"] = distance
        if walking:
            params["walking"] = True
        return self._list(ctx, "stops", params=params)

    def _list(
        self,
        ctx: RequestContext,
        path: str,
        params: dict[str, str | int | float | bool] | None,
    ) -> tuple[list[Stop], httpx.Response]:
        request = self._client.new_request(ctx, "GET", path, params=params)
        target: StructuredTarget[StopList] = StructuredTarget(StopList)
        response = self._client.do(request, target)

        stops = target.value.items if target.value is not None else []
        self._log.debug("stops_listed", count=len(stops))
        return stops, response
