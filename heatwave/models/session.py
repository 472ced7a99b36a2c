"""
session.py — Request/response schemas for the session API.

ZonesResponse      — result of a zone load (zones + nearby + selection)
ForecastEnvelope   — forecast plus its live/mock tag
SessionSnapshot    — everything the presentation layer reads
ForceModeRequest   — settings toggle for mock mode
"""

from typing import Literal, Optional

from pydantic import BaseModel

from heatwave.models.forecast import ForecastResponse
from heatwave.models.heatzone import HeatZone, Region, UserLocation

SourceKind = Literal["live", "mock"]


class ZonesResponse(BaseModel):
    """Response body for GET /api/v1/zones."""
    source: SourceKind
    is_live: bool
    fallback_reason: Optional[str] = None   # error class name when live failed
    day: int
    zones: list[HeatZone]
    nearby_zones: list[HeatZone]
    selected_zone: Optional[HeatZone] = None


class ForecastEnvelope(BaseModel):
    source: SourceKind
    is_live: bool
    fallback_reason: Optional[str] = None
    forecast: ForecastResponse


class SessionSnapshot(BaseModel):
    """Full read model of the current session."""
    zones: list[HeatZone]
    nearby_zones: list[HeatZone]
    selected_zone: Optional[HeatZone] = None
    selected_day: int
    loading: bool
    error: Optional[str] = None
    region: Region
    is_live: bool
    user_location: Optional[UserLocation] = None
    location_requested: bool


class ForceModeRequest(BaseModel):
    """Payload for PUT /api/v1/settings/mock-mode. null restores auto-detect."""
    mock: Optional[bool] = None


class ForceModeResponse(BaseModel):
    mock: Optional[bool] = None
    availability: str          # "unknown" | "available" | "unavailable"
