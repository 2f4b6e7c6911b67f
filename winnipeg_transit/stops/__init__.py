"""Stops endpoints of the Winnipeg Transit API."""

from winnipeg_transit.stops.models import (
    UTM,
    Centre,
    Geographic,
    Stop,
    StopList,
    Street,
)
from winnipeg_transit.stops.service import StopsService


__all__ = [
    "StopsService",
    "Stop",
    "StopList",
    "Street",
    "Centre",
    "Geographic",
    "UTM",
]
