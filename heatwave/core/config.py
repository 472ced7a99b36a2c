"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. Every field can be overridden with an upper-case env
var of the same name (e.g. UPSTREAM_BASE_URL, FORCE_MOCK_MODE=true).

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "0.1.0"


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── Upstream prediction service ───────────────────────────────
    # Base URL of the ConvLSTM inference API. Endpoints used:
    #   /health, /map, /predict, /forecast
    upstream_base_url: str = "http://localhost:5000/api"

    # Health probe must answer quickly; inference calls are slow.
    health_timeout_seconds: float = 3.0
    request_timeout_seconds: float = 30.0

    # Artificial latency on the mock path so the loading state looks
    # the same whether data is live or synthetic. Tests set this to 0.
    mock_delay_seconds: float = 0.3

    # None = auto-detect, True = always mock, False = always try live.
    force_mock_mode: Optional[bool] = None

    # ─── Proximity ─────────────────────────────────────────────────
    proximity_radius_degrees: float = 1.5
    nearby_fallback_limit: int = 50

    # ─── Default map viewport (Thailand) ───────────────────────────
    default_region_latitude: float = 13.7563
    default_region_longitude: float = 100.5018
    default_region_latitude_delta: float = 5.0
    default_region_longitude_delta: float = 5.0

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins for the web / mobile front-ends.
    cors_origins_str: str = "http://localhost:8081,http://localhost:19006"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── Rate limiting ─────────────────────────────────────────────
    # A zone load can hold an upstream inference call open for 30 s.
    zones_rate_limit: str = "30/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Module-level singleton; import this everywhere instead of instantiating Settings()
settings = Settings()
