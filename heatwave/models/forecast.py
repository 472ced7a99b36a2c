"""
forecast.py — Schemas for the upstream /predict and /forecast payloads.

Upstream fields are untrusted: unknown keys are kept but never required,
and a missing required key makes the whole payload malformed.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Weather readings keyed by NASA POWER parameter name (T2M, T2M_MAX, RH2M, ...).
Weather = dict[str, Optional[float]]


class BoundingBox(BaseModel):
    north: float
    south: float
    east: float
    west: float


class AnomalyTrigger(BaseModel):
    model_config = ConfigDict(extra="allow")

    feature: str
    type: str
    detail: str = ""


class AnomalyInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    is_anomaly: bool = False
    severity: str = "none"      # "none" | "moderate" | "high" | "critical"
    n_triggers: int = 0
    triggers: list[AnomalyTrigger] = Field(default_factory=list)


class PredictionSummary(BaseModel):
    """Single-point prediction returned by GET /predict."""

    model_config = ConfigDict(extra="allow")

    status: Optional[str] = None
    date: Optional[str] = None
    probability: float = Field(ge=0.0, le=1.0)
    risk_level: str             # "LOW" | "MEDIUM" | "HIGH" | "CRITICAL"
    advice: str = ""
    model_type: Optional[str] = None
    weather: Weather = Field(default_factory=dict)
    anomaly: Optional[AnomalyInfo] = None
    bbox: Optional[BoundingBox] = None


class ForecastDay(BaseModel):
    model_config = ConfigDict(extra="allow")

    day: int
    date: str                   # YYYY-MM-DD
    day_name: str = ""
    probability: float = Field(ge=0.0, le=1.0)
    risk_level: str
    risk_label: Optional[str] = None
    advice: str = ""
    weather: Weather = Field(default_factory=dict)


class ForecastResponse(BaseModel):
    """Multi-day forecast returned by GET /forecast?days=N (or synthesised)."""

    model_config = ConfigDict(extra="allow")

    status: str = "success"
    model_type: str = "unknown"
    days: int
    generated_at: str           # ISO-8601
    forecasts: list[ForecastDay]
