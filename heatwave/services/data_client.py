"""
HeatwaveDataClient — Zones, predictions and forecasts from the ConvLSTM API.

Every fetch follows the same policy:

  1. Ask the AvailabilityProbe whether the backend is usable.
  2. Unavailable → short artificial delay, then deterministic mock data.
  3. Available   → real request (30 s timeout; inference is slow).
     Any failure on the way (network, timeout, non-2xx, bad JSON, failed
     validation, an "error" field in a 2xx body) → mock data instead.

Nothing raises past this boundary. Callers get a tagged result, Live or
Mock, and decide how much to trust it from the tag. Mock.reason holds the
error that forced the fallback, or None when the probe said "offline"
before any request was made.

Endpoints (relative to settings.upstream_base_url):
  GET /map               — GeoJSON FeatureCollection of grid cells
  GET /predict           — single-point prediction summary
  GET /forecast?days=N   — per-day predictions
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime, timezone
from typing import Any, Generic, Literal, Optional, TypeVar, Union

import httpx
from pydantic import ValidationError

from heatwave.core.config import settings
from heatwave.core.errors import (
    BackendNotReady,
    HeatwaveError,
    MalformedResponse,
    NetworkUnavailable,
)
from heatwave.models.forecast import ForecastResponse, PredictionSummary
from heatwave.models.heatzone import HeatZone, Severity, ZoneGeometry, ZoneProperties
from heatwave.services.availability import AvailabilityProbe
from heatwave.services.geo_math import polygon_center
from heatwave.services.mock_data import generate_mock_forecast, generate_mock_zones

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ── Tagged results ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Live(Generic[T]):
    """Data that came from the real backend on this call."""

    data: T
    kind: Literal["live"] = "live"

    @property
    def is_live(self) -> bool:
        return True


@dataclass(frozen=True)
class Mock(Generic[T]):
    """Synthetic fallback data."""

    data: T
    reason: Optional[HeatwaveError] = None
    kind: Literal["mock"] = "mock"

    @property
    def is_live(self) -> bool:
        return False


FetchResult = Union[Live[T], Mock[T]]


# ── Upstream → HeatZone transform ─────────────────────────────────────────────

def risk_to_severity(risk: float) -> Severity:
    """Integer risk_level (0-3) → severity. Out-of-range values clamp."""
    if risk >= 3:
        return "critical"
    if risk >= 2:
        return "high"
    if risk >= 1:
        return "medium"
    return "low"


def temperature_to_probability(temp: float) -> float:
    """
    Map a cell temperature (°C) onto a display probability in [0.05, 1.0].

        < 30 °C  → 0.10-0.30 (floored at 0.05)
        30-35 °C → 0.30-0.50
        35-38 °C → 0.50-0.70
        38-41 °C → 0.70-0.90
        ≥ 41 °C  → 0.90-1.00 (+0.02 per degree, capped)
    """
    if temp >= 41:
        return min(1.0, 0.9 + (temp - 41) * 0.02)
    if temp >= 38:
        return 0.7 + ((temp - 38) / 3) * 0.2
    if temp >= 35:
        return 0.5 + ((temp - 35) / 3) * 0.2
    if temp >= 30:
        return 0.3 + ((temp - 30) / 5) * 0.2
    return max(0.05, 0.1 + (temp / 30) * 0.2)


def _number(value: Any, field: str, index: int) -> float:
    # bool is an int subclass; a true/false temperature is still garbage.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponse(f"feature {index}: {field} is not a number ({value!r})")
    try:
        number = float(value)
    except OverflowError as exc:
        raise MalformedResponse(f"feature {index}: {field} is out of range") from exc
    # json.loads accepts NaN and Infinity.
    if not math.isfinite(number):
        raise MalformedResponse(f"feature {index}: {field} is not finite ({value!r})")
    return number


def transform_features(features: list[Any], now: Optional[datetime] = None) -> list[HeatZone]:
    """
    Convert upstream grid-cell features into HeatZones.

    Raises:
        MalformedResponse: any feature is missing fields or has bad geometry.
    """
    stamp = now or datetime.now(tz=timezone.utc)
    zones: list[HeatZone] = []
    for i, feature in enumerate(features):
        try:
            props = feature["properties"]
            rings = feature["geometry"]["coordinates"]
            temperature = _number(props["temperature"], "temperature", i)
            risk = _number(props["risk_level"], "risk_level", i)
        except (KeyError, TypeError) as exc:
            raise MalformedResponse(f"feature {i} is missing {exc}") from exc

        probability = temperature_to_probability(temperature)
        try:
            geometry = ZoneGeometry(coordinates=rings)
            center = polygon_center(geometry.outer_ring)
            zone = HeatZone(
                id=f"grid-{i}",
                geometry=geometry,
                properties=ZoneProperties(
                    name=f"Zone {center.lat:.2f}°N, {center.lon:.2f}°E",
                    probability=probability,
                    severity=risk_to_severity(risk),
                    temperature=temperature,
                    # Extreme heat readings are the model's most reliable band.
                    confidence=0.9 if probability > 0.7 else 0.75,
                    last_update=stamp,
                ),
            )
        except ValidationError as exc:
            raise MalformedResponse(f"feature {i} failed validation: {exc}") from exc
        zones.append(zone)
    return zones


# ── Client ────────────────────────────────────────────────────────────────────

class HeatwaveDataClient:
    """
    Thin async wrapper around the upstream prediction API with mock fallback.

    The probe is injected so a session (or a test) owns its own
    availability verdict.
    """

    def __init__(
        self,
        probe: AvailabilityProbe,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        mock_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.probe = probe
        self.base_url = (base_url or settings.upstream_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.mock_delay = mock_delay if mock_delay is not None else settings.mock_delay_seconds
        self._transport = transport

    async def fetch_zones(
        self,
        date: Optional[Union[str, date_type]] = None,
        day_offset: int = 0,
    ) -> FetchResult[list[HeatZone]]:
        """
        Fetch the heat-zone grid for a day.

        Args:
            date:       Optional target date, forwarded as ?date= to /map.
            day_offset: Days from today; only shapes the mock fallback.
        """
        if not await self.probe.check_availability():
            await self._mock_pause()
            return Mock(generate_mock_zones(day_offset))

        params = {}
        if date is not None:
            params["date"] = date.isoformat() if isinstance(date, date_type) else str(date)

        try:
            data = await self._get_json("/map", params=params)
            features = data.get("features", [])
            if not isinstance(features, list):
                raise MalformedResponse("'features' is not a list")
            zones = transform_features(features)
        except HeatwaveError as exc:
            logger.warning("fetch_zones failed, using mock: %s: %s", type(exc).__name__, exc)
            return Mock(generate_mock_zones(day_offset), reason=exc)

        return Live(zones)

    async def fetch_prediction(self) -> Optional[PredictionSummary]:
        """
        Fetch the current single-point prediction.

        Returns None straight away in mock mode; summary mocking happens
        higher up. Also None on any live failure.
        """
        if not await self.probe.check_availability():
            return None

        try:
            data = await self._get_json("/predict")
            return _validate(PredictionSummary, data)
        except HeatwaveError as exc:
            logger.warning("fetch_prediction failed: %s: %s", type(exc).__name__, exc)
            return None

    async def fetch_forecast(self, days: int = 7) -> FetchResult[ForecastResponse]:
        """Fetch a *days*-long forecast; synthesised when the backend is unusable."""
        if not await self.probe.check_availability():
            await self._mock_pause()
            return Mock(generate_mock_forecast(days))

        try:
            data = await self._get_json("/forecast", params={"days": days})
            forecast = _validate(ForecastResponse, data)
        except HeatwaveError as exc:
            logger.warning("fetch_forecast failed, using mock: %s: %s", type(exc).__name__, exc)
            return Mock(generate_mock_forecast(days), reason=exc)

        return Live(forecast)

    # ── Internals ──────────────────────────────────────────────────────────

    async def _mock_pause(self) -> None:
        if self.mock_delay > 0:
            await asyncio.sleep(self.mock_delay)

    async def _get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        GET *path* and return the decoded JSON object.

        Raises:
            NetworkUnavailable: transport error or timeout.
            BackendNotReady:    non-2xx, or the body carries an "error" field.
            MalformedResponse:  body is not a JSON object.
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                # httpx timeouts bound each read, not the whole response.
                response = await asyncio.wait_for(
                    client.get(f"{self.base_url}{path}", params=params), self.timeout,
                )
            except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
                raise NetworkUnavailable(f"GET {path} timed out after {self.timeout}s") from exc
            except httpx.HTTPError as exc:
                raise NetworkUnavailable(f"GET {path} failed: {exc}") from exc

        if not response.is_success:
            raise BackendNotReady(f"GET {path} returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"GET {path} body is not JSON") from exc

        if not isinstance(data, dict):
            raise MalformedResponse(f"GET {path} body is not a JSON object")
        if data.get("error"):
            raise BackendNotReady(f"GET {path} reported error: {data['error']}")
        return data


def _validate(model: type[T], data: dict[str, Any]) -> T:
    try:
        return model.model_validate(data)  # type: ignore[attr-defined]
    except ValidationError as exc:
        raise MalformedResponse(f"{model.__name__} validation failed: {exc}") from exc
