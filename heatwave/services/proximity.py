"""
proximity.py — Narrow a zone list to what is near the user.

Filtering is opportunistic: without a location, or when nothing is in
range, the caller still gets zones to draw. The map is never left blank
because of the filter.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from heatwave.core.config import settings
from heatwave.core.errors import InvalidGeometry
from heatwave.models.heatzone import HeatZone, UserLocation
from heatwave.services.geo_math import degree_distance, polygon_center

logger = logging.getLogger(__name__)


def _distance_to(zone: HeatZone, location: UserLocation) -> Optional[float]:
    """Degree distance from *location* to the zone centre, None if the ring is degenerate."""
    try:
        center = polygon_center(zone.geometry.outer_ring)
    except InvalidGeometry as exc:
        logger.warning("Skipping zone %s: %s", zone.id, exc)
        return None
    return degree_distance(location.latitude, location.longitude, center.lat, center.lon)


def filter_nearby(
    zones: list[HeatZone],
    user_location: Optional[UserLocation],
    radius_degrees: Optional[float] = None,
) -> list[HeatZone]:
    """
    Keep zones whose centre lies within *radius_degrees* of the user.

    - No location, or no zones → the input, unchanged.
    - Nothing in range → the first `settings.nearby_fallback_limit` (50)
      zones of the unfiltered input.
    """
    if user_location is None or not zones:
        return zones

    radius = settings.proximity_radius_degrees if radius_degrees is None else radius_degrees

    nearby: list[HeatZone] = []
    for zone in zones:
        distance = _distance_to(zone, user_location)
        if distance is not None and distance <= radius:
            nearby.append(zone)

    if not nearby:
        logger.debug(
            "No zones within %.2f° of (%.4f, %.4f); falling back to first %d",
            radius, user_location.latitude, user_location.longitude,
            settings.nearby_fallback_limit,
        )
        return list(zones[: settings.nearby_fallback_limit])
    return nearby


def select_closest(
    zones: Sequence[HeatZone],
    user_location: Optional[UserLocation],
) -> Optional[HeatZone]:
    """
    Return the zone whose centre is closest to the user.

    Ties go to the earliest zone in *zones*. None for empty input or no
    location. Pure; the session decides when (and how often) to call it.
    """
    if user_location is None or not zones:
        return None

    best: Optional[HeatZone] = None
    best_distance = float("inf")
    for zone in zones:
        distance = _distance_to(zone, user_location)
        # Strict < keeps the first of equally close zones.
        if distance is not None and distance < best_distance:
            best = zone
            best_distance = distance
    return best
