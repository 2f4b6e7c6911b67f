"""Data models for the stops endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    """Base for API payloads: kebab-case keys, unknown fields ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Street(_ApiModel):
    """A street referenced by a stop."""

    key: int = 0
    name: str = ""
    type: str = ""


class Geographic(_ApiModel):
    """Latitude/longitude pair, as strings exactly as the API returns them."""

    latitude: str = ""
    longitude: str = ""


class UTM(_ApiModel):
    """Universal Transverse Mercator coordinates."""

    zone: str = ""
    x: int = 0
    y: int = 0


class Centre(_ApiModel):
    """Location of a stop in both coordinate systems."""

    utm: UTM = Field(default_factory=UTM)
    geographic: Geographic = Field(default_factory=Geographic)


class Stop(_ApiModel):
    """A transit stop."""

    key: int = 0
    name: str = ""
    number: int = 0
    direction: str = ""
    side: str = ""
    street: Street = Field(default_factory=Street)
    cross_street: Street = Field(default_factory=Street, alias="cross-street")
    centre: Centre = Field(default_factory=Centre)


class StopList(_ApiModel):
    """Envelope returned by the stops endpoints."""

    items: list[Stop] = Field(default_factory=list, alias="stops")
    query_time: str = Field(default="", alias="query-time")
