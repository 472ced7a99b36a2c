"""
mock_data.py — Deterministic synthetic zones and forecasts.

Served whenever the upstream ConvLSTM API is unreachable, not ready, or
returns something unusable. Output depends only on the arguments (plus the
current date for forecast dates), so two calls with the same day offset
give the same zones.

Probability is the single source of truth: severity and risk labels are
always derived from it through RISK_LEVELS, never stored independently.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from heatwave.models.forecast import ForecastDay, ForecastResponse
from heatwave.models.heatzone import HeatZone, Severity, ZoneGeometry, ZoneProperties

# ── Risk level table ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RiskLevel:
    level: str              # "LOW" | "MEDIUM" | "HIGH" | "CRITICAL"
    severity: Severity
    label: str
    min_probability: float
    max_probability: float
    action: str
    recommendations: tuple[str, ...]


# Ordered lowest → highest. Lower bound inclusive.
RISK_LEVELS: tuple[RiskLevel, ...] = (
    RiskLevel(
        level="LOW", severity="low", label="Low Risk",
        min_probability=0.0, max_probability=0.4,
        action="Normal conditions",
        recommendations=(
            "No special precautions needed",
            "Stay informed about weather updates",
            "Enjoy outdoor activities normally",
        ),
    ),
    RiskLevel(
        level="MEDIUM", severity="medium", label="Medium Risk",
        min_probability=0.4, max_probability=0.6,
        action="Monitor conditions",
        recommendations=(
            "Drink plenty of water throughout the day",
            "Limit prolonged sun exposure",
            "Check on elderly and vulnerable people",
            "Plan outdoor activities for cooler hours",
        ),
    ),
    RiskLevel(
        level="HIGH", severity="high", label="High Risk",
        min_probability=0.6, max_probability=0.8,
        action="Stay hydrated, avoid outdoors",
        recommendations=(
            "Avoid outdoor activity between 10 AM and 4 PM",
            "Wear lightweight, light-coloured clothing",
            "Use sunscreen SPF 50+ if going outside",
            "Keep rooms cool with fans or AC",
            "Watch for signs of heat exhaustion",
        ),
    ),
    RiskLevel(
        level="CRITICAL", severity="critical", label="Critical Risk",
        min_probability=0.8, max_probability=1.0,
        action="Take immediate precautions",
        recommendations=(
            "Stay indoors in air-conditioned spaces",
            "Cancel or postpone all outdoor activities",
            "Drink water every 15 to 20 minutes",
            "Never leave children or pets in vehicles",
            "Seek medical attention for heat-related symptoms",
            "Check on neighbours, especially the elderly",
        ),
    ),
)


def risk_level_for(probability: float) -> RiskLevel:
    """Return the RISK_LEVELS band containing *probability* (clamped to [0, 1])."""
    clamped = max(0.0, min(1.0, probability))
    for level in reversed(RISK_LEVELS):
        if clamped >= level.min_probability:
            return level
    return RISK_LEVELS[0]


def severity_for(probability: float) -> Severity:
    return risk_level_for(probability).severity


# ── Zone constellation ────────────────────────────────────────────────────────
#
# Each entry: id, name, (west, south, east, north), base probability,
# per-day probability weight, base temperature °C, per-day temperature drift,
# confidence.

_ZoneSeed = tuple[str, str, tuple[float, float, float, float], float, float, float, float, float]

_ZONE_SEEDS: tuple[_ZoneSeed, ...] = (
    # Bangkok
    ("bkk-central",  "Bangkok Central",             (100.48, 13.72, 100.54, 13.78), 0.85, 0.05, 42.0, 0.30, 0.92),
    ("bkk-north",    "Bangkok North (Don Mueang)",  (100.46, 13.82, 100.56, 13.90), 0.65, 0.08, 39.0, 0.20, 0.87),
    ("bkk-east",     "Bangkok East (Bangkapi)",     (100.58, 13.70, 100.68, 13.80), 0.52, 0.06, 37.0, 0.25, 0.81),
    ("bkk-thonburi", "Thonburi",                    (100.38, 13.70, 100.47, 13.78), 0.45, 0.04, 36.0, 0.15, 0.79),
    ("bkk-south",    "Bangkok South (Sathorn)",     (100.48, 13.60, 100.58, 13.70), 0.30, 0.03, 34.0, 0.10, 0.85),
    # Chiang Mai
    ("cm-city",      "Chiang Mai City",             (98.94, 18.76, 99.02, 18.82),   0.72, 0.07, 40.0, 0.35, 0.88),
    ("cm-north",     "Chiang Mai North (Mae Rim)",  (98.92, 18.84, 99.04, 18.94),   0.38, 0.04, 35.0, 0.20, 0.76),
    ("cm-south",     "Chiang Mai South (Hang Dong)", (98.90, 18.68, 99.00, 18.76),  0.55, 0.05, 38.0, 0.15, 0.82),
    ("cm-east",      "Chiang Mai East (San Kamphaeng)", (99.04, 18.74, 99.14, 18.82), 0.48, 0.06, 37.5, 0.25, 0.80),
)

# Day offset → probability shift multiplier.
_DAY_SHIFT = 0.15


def _box_ring(west: float, south: float, east: float, north: float) -> list[list[float]]:
    return [[west, south], [east, south], [east, north], [west, north], [west, south]]


def generate_mock_zones(day_offset: int = 0, now: Optional[datetime] = None) -> list[HeatZone]:
    """
    Build the nine fallback zones (Bangkok + Chiang Mai) for *day_offset*.

    Later days push every zone's probability up; severity is re-derived from
    the shifted probability.
    """
    stamp = now or datetime.now(tz=timezone.utc)
    shift = day_offset * _DAY_SHIFT

    zones: list[HeatZone] = []
    for zone_id, name, bounds, base_p, weight, base_t, drift, confidence in _ZONE_SEEDS:
        probability = max(0.0, min(1.0, base_p + shift * weight))
        zones.append(
            HeatZone(
                id=zone_id,
                geometry=ZoneGeometry(coordinates=[_box_ring(*bounds)]),
                properties=ZoneProperties(
                    name=name,
                    probability=probability,
                    severity=severity_for(probability),
                    temperature=round(base_t + day_offset * drift, 2),
                    confidence=confidence,
                    last_update=stamp,
                ),
            )
        )
    return zones


# ── Forecast ──────────────────────────────────────────────────────────────────

_FORECAST_BASE_PROBABILITY = 0.35
_FORECAST_DAILY_RISE = 0.07
_FORECAST_NOISE = 0.03


def _noise(day: int) -> float:
    """Deterministic jitter in [0, _FORECAST_NOISE] for *day*."""
    return (math.sin(day * 12.9898) * 43758.5453) % 1.0 * _FORECAST_NOISE


def generate_mock_forecast(days: int = 7, start: Optional[date] = None) -> ForecastResponse:
    """
    Build a *days*-long forecast starting the day after *start* (default today).

    Probability climbs every day by a fixed step plus a little deterministic
    noise, so the series never decreases. It saturates at 1.0.
    """
    first = (start or date.today()) + timedelta(days=1)
    forecasts: list[ForecastDay] = []
    previous = 0.0
    for i in range(days):
        day = i + 1
        raw = _FORECAST_BASE_PROBABILITY + i * _FORECAST_DAILY_RISE + _noise(day)
        probability = round(min(1.0, max(previous, raw)), 3)
        previous = probability

        level = risk_level_for(probability)
        t_max = round(33.0 + probability * 10.0, 1)
        day_date = first + timedelta(days=i)
        forecasts.append(
            ForecastDay(
                day=day,
                date=day_date.isoformat(),
                day_name=day_date.strftime("%A"),
                probability=probability,
                risk_level=level.severity,
                risk_label=level.level,
                advice=level.action,
                weather={
                    "T2M_MAX": t_max,
                    "T2M_MIN": round(t_max - 8.0, 1),
                    "T2M": round(t_max - 4.0, 1),
                    "PRECTOTCORR": round(max(0.0, 3.0 - probability * 3.0), 2),
                    "WS10M": 2.1,
                    "RH2M": round(70.0 - probability * 20.0, 1),
                    "NDVI": None,
                },
            )
        )

    return ForecastResponse(
        status="success",
        model_type="mock",
        days=days,
        generated_at=datetime.now(tz=timezone.utc).isoformat(),
        forecasts=forecasts,
    )
