"""
geo_math.py — Cheap planar geometry over [lon, lat] polygon rings.

Distances are Euclidean in degree space, not great-circle. Good enough to
rank zones inside one city or province; wrong near the poles and across
whole countries.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

from heatwave.core.errors import InvalidGeometry


class LatLon(NamedTuple):
    lat: float
    lon: float


def degree_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """sqrt(Δlat² + Δlon²), in degrees."""
    return math.sqrt((lat2 - lat1) ** 2 + (lon2 - lon1) ** 2)


def polygon_center(ring: Sequence[Sequence[float]]) -> LatLon:
    """
    Return the (lat, lon) centre as the mean of every vertex in *ring*.

    The closing vertex (a repeat of the first) is counted too, so the first
    corner gets double weight. This is a vertex average, not an
    area-weighted centroid; for irregular or non-convex polygons the two
    differ. Zone names and proximity ranking depend on the current numbers,
    so leave it as is.

    Raises:
        InvalidGeometry: ring has no vertices or a vertex lacks lon/lat.
    """
    if not ring:
        raise InvalidGeometry("cannot take the centre of an empty ring")

    lat_sum = 0.0
    lon_sum = 0.0
    for vertex in ring:
        if len(vertex) < 2:
            raise InvalidGeometry(f"vertex {vertex!r} is not a [lon, lat] pair")
        lon_sum += vertex[0]
        lat_sum += vertex[1]

    n = len(ring)
    return LatLon(lat_sum / n, lon_sum / n)
