"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction
  - Load balancers / orchestrators
  - Front-end to show the LIVE / MOCK badge

Returns this service's liveness plus the cached upstream verdict, so
callers can tell "service down" apart from "service up, serving mock data".
Never triggers a new upstream probe; it only reports what the session's
probe already knows.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from heatwave.core.config import VERSION, settings
from heatwave.services.session import HeatwaveSession, get_session

router = APIRouter()


class HealthResponse(BaseModel):
    status: str                       # Always "ok" if the process is alive
    version: str
    upstream: str                     # "unknown" | "available" | "unavailable"
    force_mode: Optional[bool] = None
    upstream_error: Optional[str] = None
    environment: str


@router.get("", response_model=HealthResponse, summary="Service health check")
async def health_check(session: HeatwaveSession = Depends(get_session)) -> HealthResponse:
    """
    Returns the liveness status of the service and its upstream verdict.

    The service is healthy (HTTP 200) even when the upstream API is
    offline: zone requests still succeed with mock data.
    """
    probe = session.probe
    error = probe.last_error
    return HealthResponse(
        status="ok",
        version=VERSION,
        upstream=probe.state.value,
        force_mode=probe.force_mode,
        upstream_error=f"{type(error).__name__}: {error}" if error else None,
        environment=settings.environment,
    )
