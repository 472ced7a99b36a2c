"""
heatzone.py — Pydantic models for heat-risk zones and map geometry.

HeatZone    — one GeoJSON polygon feature with heat-risk properties
UserLocation — device position (optional for the whole session)
Region      — map viewport: centre + span in degrees
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Severity = Literal["low", "medium", "high", "critical"]

# A vertex is [longitude, latitude], GeoJSON order.
Ring = list[list[float]]


class ZoneGeometry(BaseModel):
    """GeoJSON Polygon. coordinates[0] is the outer ring."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Polygon"] = "Polygon"
    coordinates: list[Ring]

    @field_validator("coordinates")
    @classmethod
    def _outer_ring_closed(cls, rings: list[Ring]) -> list[Ring]:
        if not rings:
            raise ValueError("polygon has no rings")
        outer = rings[0]
        if len(outer) < 4:
            raise ValueError(f"outer ring needs at least 4 points, got {len(outer)}")
        for vertex in outer:
            if len(vertex) < 2:
                raise ValueError("vertex must be [longitude, latitude]")
        if outer[0][:2] != outer[-1][:2]:
            raise ValueError("outer ring is not closed")
        return rings

    @property
    def outer_ring(self) -> Ring:
        return self.coordinates[0]


class ZoneProperties(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    probability: float = Field(ge=0.0, le=1.0)
    severity: Severity
    temperature: float                          # °C
    confidence: float = Field(ge=0.0, le=1.0)
    last_update: datetime


class HeatZone(BaseModel):
    """A single heat-risk polygon. Immutable; a fetch replaces the whole list."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["Feature"] = "Feature"
    geometry: ZoneGeometry
    properties: ZoneProperties


class UserLocation(BaseModel):
    """Resolved device position. `accuracy` is the radius in metres, if known."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    accuracy: Optional[float] = Field(default=None, ge=0.0)


class Region(BaseModel):
    """Map viewport (centre + span). Owned by the session."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    latitude_delta: float = Field(gt=0.0)
    longitude_delta: float = Field(gt=0.0)
