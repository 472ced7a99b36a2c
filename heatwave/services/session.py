"""
session.py — In-memory session state and the controller that mutates it.

SessionState is a plain container read by the presentation layer.
HeatwaveSession owns the probe, the data client and the state, and is the
only thing that writes to it.

Ordering rules enforced here:

  - Zone loads are sequence-stamped. If the user switches day while an
    older (slow) load is still in flight, the older result is dropped when
    it lands instead of overwriting the newer one.
  - Geolocation is requested at most once per session.
  - Auto-selection of the closest zone fires once per resolved location.
    A duplicate location event does not move the selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Awaitable, Callable, Optional

from heatwave.core.config import settings
from heatwave.models.heatzone import HeatZone, Region, UserLocation
from heatwave.services.availability import AvailabilityProbe
from heatwave.services.data_client import FetchResult, HeatwaveDataClient
from heatwave.services.proximity import filter_nearby, select_closest

logger = logging.getLogger(__name__)

# Viewport span when centring on the user (roughly city scale).
USER_REGION_DELTA = 0.5

# Host geolocation: resolves to a location, or None / raises when denied.
Locator = Callable[[], Awaitable[Optional[UserLocation]]]


def default_region() -> Region:
    return Region(
        latitude=settings.default_region_latitude,
        longitude=settings.default_region_longitude,
        latitude_delta=settings.default_region_latitude_delta,
        longitude_delta=settings.default_region_longitude_delta,
    )


@dataclass
class SessionState:
    zones: list[HeatZone] = field(default_factory=list)
    nearby_zones: list[HeatZone] = field(default_factory=list)
    # Selection is an id into `zones`, never a second copy of the zone.
    selected_zone_id: Optional[str] = None
    selected_day: int = 0
    loading: bool = True
    error: Optional[str] = None
    region: Region = field(default_factory=default_region)
    is_live: bool = False
    user_location: Optional[UserLocation] = None
    location_requested: bool = False

    @property
    def selected_zone(self) -> Optional[HeatZone]:
        if self.selected_zone_id is None:
            return None
        for zone in self.zones:
            if zone.id == self.selected_zone_id:
                return zone
        return None


class HeatwaveSession:
    """One user's view of the heatwave data. Single event loop; no locks."""

    def __init__(
        self,
        client: Optional[HeatwaveDataClient] = None,
        probe: Optional[AvailabilityProbe] = None,
    ) -> None:
        if client is None:
            probe = probe or AvailabilityProbe(force_mode=settings.force_mock_mode)
            client = HeatwaveDataClient(probe)
        self.client = client
        self.probe = client.probe
        self.state = SessionState()
        self._load_seq = 0
        self._auto_selected = False

    # ── Zone loading ───────────────────────────────────────────────────────

    async def load_zones(self, day: Optional[int] = None) -> Optional[FetchResult[list[HeatZone]]]:
        """
        Fetch zones for *day* (default: the currently selected day) and apply them.

        Returns the fetch result, or None when a newer load started while
        this one was waiting; in that case the state is left untouched.
        """
        if day is not None:
            self.state.selected_day = day
        day_offset = self.state.selected_day

        self._load_seq += 1
        seq = self._load_seq
        self.state.loading = True

        target = date.today() + timedelta(days=day_offset)
        result = await self.client.fetch_zones(target, day_offset=day_offset)

        if seq != self._load_seq:
            logger.debug("Discarding stale zone load #%d (latest is #%d)", seq, self._load_seq)
            return None

        self.state.zones = result.data
        if self.state.selected_zone is None:
            self.state.selected_zone_id = None
        self.state.is_live = result.is_live
        self.state.error = None
        self.state.loading = False
        self._refresh_nearby()
        self._maybe_auto_select()
        return result

    def _refresh_nearby(self) -> None:
        self.state.nearby_zones = filter_nearby(self.state.zones, self.state.user_location)

    def _maybe_auto_select(self) -> None:
        """Select the closest zone overall, once per resolved location."""
        if self._auto_selected or self.state.user_location is None or not self.state.zones:
            return
        closest = select_closest(self.state.zones, self.state.user_location)
        self._auto_selected = True
        if closest is not None:
            self.state.selected_zone_id = closest.id
            logger.info("Auto-selected closest zone %s", closest.id)

    # ── Location ───────────────────────────────────────────────────────────

    async def request_location(self, locator: Locator) -> Optional[UserLocation]:
        """
        Ask the host for the device position, at most once per session.

        Denial or failure leaves the session without a location; that is a
        normal state, so it is recorded in `error` but not raised.
        """
        if self.state.location_requested:
            return self.state.user_location
        self.state.location_requested = True

        try:
            location = await locator()
        except Exception as exc:
            logger.warning("Geolocation failed: %s", exc)
            self.state.error = f"Location unavailable: {exc}"
            return None

        if location is not None:
            self.set_user_location(location)
        return location

    def set_user_location(self, location: UserLocation) -> None:
        """Record a resolved location; recentres the map and auto-selects once."""
        if self.state.user_location == location:
            return
        self.state.user_location = location
        self.state.location_requested = True
        self.state.region = Region(
            latitude=location.latitude,
            longitude=location.longitude,
            latitude_delta=USER_REGION_DELTA,
            longitude_delta=USER_REGION_DELTA,
        )
        self._refresh_nearby()
        self._maybe_auto_select()

    def clear_user_location(self) -> None:
        """Forget the location and re-arm both the request and auto-select latches."""
        self.state.user_location = None
        self.state.location_requested = False
        self._auto_selected = False
        self._refresh_nearby()

    # ── Plain setters ──────────────────────────────────────────────────────

    def select_zone(self, zone_id: Optional[str]) -> Optional[HeatZone]:
        """
        Select a zone by id (None clears).

        Raises:
            KeyError: *zone_id* is not in the current zones.
        """
        if zone_id is None:
            self.state.selected_zone_id = None
            return None
        for zone in self.state.zones:
            if zone.id == zone_id:
                self.state.selected_zone_id = zone_id
                return zone
        raise KeyError(zone_id)

    def clear_selection(self) -> None:
        self.state.selected_zone_id = None

    def set_region(self, region: Region) -> None:
        self.state.region = region


# ── Process session ───────────────────────────────────────────────────────────
#
# The HTTP layer serves a single session. Routes receive it through
# Depends(get_session) so tests can swap in their own via
# app.dependency_overrides.

_session: Optional[HeatwaveSession] = None


def get_session() -> HeatwaveSession:
    global _session
    if _session is None:
        _session = HeatwaveSession()
    return _session
