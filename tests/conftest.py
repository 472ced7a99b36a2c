"""
pytest configuration and shared fixtures for the Heatwave tests.

Key concern: tests must never touch a real upstream ConvLSTM API.
We achieve this by:
  1. Injecting an httpx.MockTransport (FakeUpstream) into every probe and
     data client, so requests are answered in-process.
  2. Setting MOCK_DELAY_SECONDS=0 so the mock path doesn't sleep.
  3. Overriding get_session for API tests so each test gets a fresh
     session wired to its own FakeUpstream.
"""

import asyncio
import os
from typing import Any, Callable, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("MOCK_DELAY_SECONDS", "0")

from heatwave.models.heatzone import HeatZone, ZoneGeometry, ZoneProperties  # noqa: E402
from heatwave.services.availability import AvailabilityProbe  # noqa: E402
from heatwave.services.data_client import HeatwaveDataClient  # noqa: E402
from heatwave.services.session import HeatwaveSession  # noqa: E402

UPSTREAM = "http://upstream.test/api"


def box_ring(lat: float, lon: float, half: float = 0.01) -> list[list[float]]:
    """Closed square ring of half-width *half* around (lat, lon), [lon, lat] order."""
    return [
        [lon - half, lat - half],
        [lon + half, lat - half],
        [lon + half, lat + half],
        [lon - half, lat + half],
        [lon - half, lat - half],
    ]


def grid_feature(lat: float, lon: float, temperature: Any = 36.0, risk_level: Any = 1) -> dict:
    """One upstream /map grid cell."""
    return {
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": [box_ring(lat, lon)]},
        "properties": {"temperature": temperature, "risk_level": risk_level},
    }


class FakeUpstream:
    """
    In-process stand-in for the ConvLSTM API.

    routes:   endpoint name ("health", "map", ...) → (status, body).
              A dict/list body is sent as JSON; str/bytes as raw content.
    failures: endpoint name → exception raised instead of answering.
    calls:    endpoint names in the order they were requested.
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any]] = {
            "health": (200, {"status": "ok", "model_loaded": True}),
            "map": (200, {
                "type": "FeatureCollection",
                "features": [
                    grid_feature(13.75, 100.50, temperature=42.0, risk_level=3),
                    grid_feature(13.85, 100.60, temperature=33.0, risk_level=0),
                ],
            }),
            "predict": (200, {
                "status": "success",
                "date": "2026-04-20",
                "probability": 0.82,
                "risk_level": "CRITICAL",
                "advice": "Stay indoors",
                "model_type": "convlstm",
                "weather": {"T2M": 34.1, "T2M_MAX": 41.2, "NDVI": None},
                "anomaly": {"is_anomaly": False, "severity": "none", "n_triggers": 0, "triggers": []},
            }),
            "forecast": (200, {
                "status": "success",
                "model_type": "convlstm",
                "days": 2,
                "generated_at": "2026-04-20T00:00:00+00:00",
                "forecasts": [
                    {"day": 1, "date": "2026-04-21", "day_name": "Tuesday", "probability": 0.6,
                     "risk_level": "high", "risk_label": "HIGH", "advice": "", "weather": {}},
                    {"day": 2, "date": "2026-04-22", "day_name": "Wednesday", "probability": 0.7,
                     "risk_level": "high", "risk_label": "HIGH", "advice": "", "weather": {}},
                ],
            }),
        }
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        self.calls.append(name)
        self.requests.append(request)
        if name in self.failures:
            raise self.failures[name]
        if name not in self.routes:
            return httpx.Response(404, json={"error": "not found"})
        status, body = self.routes[name]
        if isinstance(body, (str, bytes)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, name: str) -> int:
        return self.calls.count(name)

    def go_offline(self) -> None:
        for name in ("health", "map", "predict", "forecast"):
            self.failures[name] = httpx.ConnectError("connection refused")


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def probe(upstream) -> AvailabilityProbe:
    return AvailabilityProbe(base_url=UPSTREAM, transport=upstream.transport())


@pytest.fixture()
def data_client(probe, upstream) -> HeatwaveDataClient:
    return HeatwaveDataClient(probe, base_url=UPSTREAM, mock_delay=0, transport=upstream.transport())


@pytest.fixture()
def session(data_client) -> HeatwaveSession:
    return HeatwaveSession(client=data_client)


@pytest.fixture()
def make_zone() -> Callable[..., HeatZone]:
    """Factory: make_zone("id", lat, lon, probability=0.5) → HeatZone."""

    def _make(zone_id: str, lat: float, lon: float, probability: float = 0.5,
              half: float = 0.01, name: Optional[str] = None) -> HeatZone:
        return HeatZone(
            id=zone_id,
            geometry=ZoneGeometry(coordinates=[box_ring(lat, lon, half)]),
            properties=ZoneProperties(
                name=name or zone_id,
                probability=probability,
                severity="medium",
                temperature=36.0,
                confidence=0.8,
                last_update="2026-04-20T00:00:00Z",
            ),
        )

    return _make


@pytest.fixture()
async def api(session):
    """
    HTTPX async test client wired to the FastAPI app with *session* injected.

    Usage:
        async def test_something(api):
            response = await api.get("/health")
            assert response.status_code == 200
    """
    from heatwave.core.rate_limit import limiter
    from heatwave.main import app
    from heatwave.services.session import get_session

    # Reset in-memory rate-limit counters so tests are independent.
    try:
        limiter._limiter.storage.reset()
    except Exception:
        pass  # Not every storage backend supports reset.

    app.dependency_overrides[get_session] = lambda: session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def trickle_server():
    """
    Real local HTTP server that sends its headers at once, then the body one
    byte every 0.2 s. Every single read finishes well inside any timeout, so
    only a whole-request deadline can cut it off. Yields an /api base URL.
    """
    body = b'{"status": "ok", "model_loaded": true, "features": []}'

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                b"Content-Length: " + str(len(body)).encode() + b"\r\n\r\n"
            )
            await writer.drain()
            for i in range(len(body)):
                writer.write(body[i:i + 1])
                await writer.drain()
                try:
                    # b"" once the client hangs up.
                    if await asyncio.wait_for(reader.read(1), 0.2) == b"":
                        break
                except asyncio.TimeoutError:
                    pass
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    yield f"http://127.0.0.1:{port}/api"
    server.close()
    await server.wait_closed()
