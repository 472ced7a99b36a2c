"""
session.py — Session read model and mutation setters.

Routes:
  GET    /api/v1/session                  — full snapshot
  PUT    /api/v1/session/location         — device location resolved
  DELETE /api/v1/session/location         — forget location, re-arm latches
  PUT    /api/v1/session/selection/{id}   — select a zone
  DELETE /api/v1/session/selection        — clear selection
  PUT    /api/v1/session/region           — pan / zoom
  PUT    /api/v1/settings/mock-mode       — force mock / live / auto
  POST   /api/v1/settings/reset-cache     — forget the upstream verdict

The front-end owns geolocation: it asks the OS once and PUTs the result
here. Sending the same location again is harmless; the closest-zone
auto-selection only fires for the first one.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from heatwave.models.heatzone import Region, UserLocation
from heatwave.models.session import ForceModeRequest, ForceModeResponse, SessionSnapshot
from heatwave.services.session import HeatwaveSession, get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["session"])


def _snapshot(session: HeatwaveSession) -> SessionSnapshot:
    state = session.state
    return SessionSnapshot(
        zones=state.zones,
        nearby_zones=state.nearby_zones,
        selected_zone=state.selected_zone,
        selected_day=state.selected_day,
        loading=state.loading,
        error=state.error,
        region=state.region,
        is_live=state.is_live,
        user_location=state.user_location,
        location_requested=state.location_requested,
    )


@router.get("/session", response_model=SessionSnapshot)
async def get_snapshot(session: HeatwaveSession = Depends(get_session)):
    return _snapshot(session)


@router.put("/session/location", response_model=SessionSnapshot)
async def set_location(location: UserLocation, session: HeatwaveSession = Depends(get_session)):
    """Record the device location, recentre the map, auto-select once."""
    session.set_user_location(location)
    return _snapshot(session)


@router.delete("/session/location", response_model=SessionSnapshot)
async def clear_location(session: HeatwaveSession = Depends(get_session)):
    session.clear_user_location()
    return _snapshot(session)


@router.put("/session/selection/{zone_id}", response_model=SessionSnapshot)
async def select_zone(zone_id: str, session: HeatwaveSession = Depends(get_session)):
    try:
        session.select_zone(zone_id)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Zone {zone_id!r} is not in the current zone set",
        )
    return _snapshot(session)


@router.delete("/session/selection", response_model=SessionSnapshot)
async def clear_selection(session: HeatwaveSession = Depends(get_session)):
    session.clear_selection()
    return _snapshot(session)


@router.put("/session/region", response_model=SessionSnapshot)
async def set_region(region: Region, session: HeatwaveSession = Depends(get_session)):
    session.set_region(region)
    return _snapshot(session)


# ── Settings ──────────────────────────────────────────────────────────────────

@router.put("/settings/mock-mode", response_model=ForceModeResponse)
async def set_mock_mode(payload: ForceModeRequest, session: HeatwaveSession = Depends(get_session)):
    """
    Mirror of the "Mock Data Mode" switch.

    {"mock": true}  — always serve mock data
    {"mock": false} — always try the live backend
    {"mock": null}  — auto-detect
    """
    session.probe.set_force_mode(payload.mock)
    return ForceModeResponse(mock=session.probe.force_mode, availability=session.probe.state.value)


@router.post("/settings/reset-cache", response_model=ForceModeResponse)
async def reset_cache(session: HeatwaveSession = Depends(get_session)):
    """Forget the memoized upstream verdict; the next fetch probes again."""
    session.probe.reset_cache()
    logger.info("Upstream availability cache reset via API")
    return ForceModeResponse(mock=session.probe.force_mode, availability=session.probe.state.value)
