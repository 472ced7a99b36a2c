"""
zones.py — Heat-zone, prediction and forecast routes.

Routes:
  GET /api/v1/zones          — load zones for a day into the session
  GET /api/v1/zones/nearby   — zones near the user from the last load
  GET /api/v1/prediction     — current single-point prediction (null offline)
  GET /api/v1/forecast       — N-day forecast, live or synthesised

None of these return 5xx because the upstream API is down: the data client
falls back to mock data and the response says so in `source`.

Manual test with curl:
  curl "http://localhost:8000/api/v1/zones?day=2"
  curl "http://localhost:8000/api/v1/forecast?days=5"
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from heatwave.core.config import settings
from heatwave.core.rate_limit import limiter
from heatwave.models.forecast import PredictionSummary
from heatwave.models.heatzone import HeatZone
from heatwave.models.session import ForecastEnvelope, ZonesResponse
from heatwave.services.data_client import Mock
from heatwave.services.session import HeatwaveSession, get_session

router = APIRouter(prefix="/api/v1", tags=["zones"])


def _fallback_reason(result) -> Optional[str]:
    if isinstance(result, Mock) and result.reason is not None:
        return type(result.reason).__name__
    return None


@router.get("/zones", response_model=ZonesResponse)
@limiter.limit(settings.zones_rate_limit)
async def load_zones(
    request: Request,
    # 0 = today ("NOW"), 1 = tomorrow, ... matches the timeline bar.
    day: Optional[int] = Query(default=None, ge=0, le=14, description="Day offset (omit for current)"),
    session: HeatwaveSession = Depends(get_session),
):
    """
    Fetch zones for *day* and store them in the session.

    Also recomputes the nearby subset and, the first time a user location
    is known, auto-selects the closest zone.
    """
    result = await session.load_zones(day)
    state = session.state

    if result is None:
        # A newer load finished first; report what the session now holds.
        source = "live" if state.is_live else "mock"
        reason = None
    else:
        source = result.kind
        reason = _fallback_reason(result)

    return ZonesResponse(
        source=source,
        is_live=state.is_live,
        fallback_reason=reason,
        day=state.selected_day,
        zones=state.zones,
        nearby_zones=state.nearby_zones,
        selected_zone=state.selected_zone,
    )


@router.get("/zones/nearby", response_model=list[HeatZone])
async def nearby_zones(session: HeatwaveSession = Depends(get_session)):
    """Zones near the user (all zones when no location is known)."""
    return session.state.nearby_zones


@router.get("/prediction", response_model=Optional[PredictionSummary])
async def prediction(session: HeatwaveSession = Depends(get_session)):
    """
    Return the upstream prediction summary.

    JSON null when the backend is offline or the call failed; the client
    decides what to show instead.
    """
    return await session.client.fetch_prediction()


@router.get("/forecast", response_model=ForecastEnvelope)
async def forecast(
    days: int = Query(default=7, ge=1, le=14, description="Number of days to forecast"),
    session: HeatwaveSession = Depends(get_session),
):
    """Return a *days*-long forecast, tagged live or mock."""
    result = await session.client.fetch_forecast(days)
    return ForecastEnvelope(
        source=result.kind,
        is_live=result.is_live,
        fallback_reason=_fallback_reason(result),
        forecast=result.data,
    )
