"""
errors.py — Failure taxonomy for the heatwave client.

NetworkUnavailable, BackendNotReady and MalformedResponse are raised by the
upstream request helpers and never leave the data client: it converts them
into a mock fallback. InvalidGeometry comes from geo_math and only ever
knocks out a single zone.
"""


class HeatwaveError(Exception):
    """Base class for every error the core raises."""


class NetworkUnavailable(HeatwaveError):
    """Upstream could not be reached, or the request timed out."""


class BackendNotReady(HeatwaveError):
    """Upstream answered but is not serving (non-2xx, model not loaded, error field)."""


class MalformedResponse(HeatwaveError):
    """Upstream payload is not JSON or fails shape/field validation."""


class InvalidGeometry(HeatwaveError):
    """Degenerate polygon ring (e.g. no vertices)."""
