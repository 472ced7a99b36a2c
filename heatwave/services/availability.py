"""
availability.py — Cached readiness probe for the upstream prediction API.

One GET /health per probe instance (until reset_cache()), 3 s timeout.
The backend counts as available only when it answers 2xx with
{"status": "ok", "model_loaded": true}. A reachable server whose model is
still loading is treated exactly like an unreachable one.

Each session owns its own probe; nothing here is module-global, so tests
and parallel sessions don't share a verdict.

Force mode (from the settings screen):
  True  → always mock, never probe; clears any memoized verdict
  False → always attempt live; still probes once so /health can report it
  None  → auto-detect (default)
"""

import asyncio
import enum
import logging
from typing import Optional

import httpx

from heatwave.core.config import settings
from heatwave.core.errors import (
    BackendNotReady,
    HeatwaveError,
    MalformedResponse,
    NetworkUnavailable,
)

logger = logging.getLogger(__name__)


class AvailabilityState(str, enum.Enum):
    UNKNOWN = "unknown"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class AvailabilityProbe:
    """Memoized health check against `{base_url}/health`."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        force_mode: Optional[bool] = None,
    ) -> None:
        self.base_url = (base_url or settings.upstream_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.health_timeout_seconds
        # Injected by tests (httpx.MockTransport); None → real network.
        self._transport = transport
        self._state = AvailabilityState.UNKNOWN
        self._force_mode: Optional[bool] = force_mode
        self._last_error: Optional[HeatwaveError] = None
        # Concurrent checks share one in-flight probe. Bumping the generation
        # (reset_cache) orphans it so its verdict is never written.
        self._inflight: Optional[asyncio.Task] = None
        self._generation = 0

    # ── Read-only views ────────────────────────────────────────────────────

    @property
    def state(self) -> AvailabilityState:
        return self._state

    @property
    def force_mode(self) -> Optional[bool]:
        return self._force_mode

    @property
    def last_error(self) -> Optional[HeatwaveError]:
        return self._last_error

    @property
    def is_connected(self) -> bool:
        return self._state is AvailabilityState.AVAILABLE

    # ── Control ────────────────────────────────────────────────────────────

    def reset_cache(self) -> None:
        """Forget the memoized verdict; the next check probes again."""
        self._state = AvailabilityState.UNKNOWN
        self._last_error = None
        self._generation += 1
        self._inflight = None

    def set_force_mode(self, mock: Optional[bool]) -> None:
        """
        Override auto-detection.

        Forcing mock drops the memoized verdict: the backend was not checked
        while mocked, so nothing learned before it may be reused afterwards.
        """
        self._force_mode = mock
        if mock is True:
            self.reset_cache()
        logger.info("Availability force mode set to %s", _describe_force(mock))

    # ── Probe ──────────────────────────────────────────────────────────────

    async def check_availability(self) -> bool:
        """
        Return True when the data client should try the live backend.

        Memoized: only the first call (after construction or reset_cache)
        touches the network; callers arriving while that probe is in flight
        wait for it instead of starting their own.
        """
        if self._force_mode is True:
            return False

        if self._state is AvailabilityState.UNKNOWN:
            await self._probe_once()

        # Force mode may have changed while the probe was in flight.
        if self._force_mode is not None:
            return not self._force_mode
        return self._state is AvailabilityState.AVAILABLE

    async def _probe_once(self) -> None:
        if self._inflight is None:
            task = asyncio.create_task(self._probe(self._generation))
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        # shield: a cancelled caller must not cancel the probe other callers await.
        await asyncio.shield(self._inflight)

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _probe(self, generation: int) -> None:
        try:
            await self._request_health()
        except HeatwaveError as exc:
            if generation != self._generation:
                logger.debug("Discarding stale health verdict (cache was reset)")
                return
            self._state = AvailabilityState.UNAVAILABLE
            self._last_error = exc
            logger.info(
                "Backend OFFLINE at %s (%s: %s), using mock data",
                self.base_url, type(exc).__name__, exc,
            )
            return

        if generation != self._generation:
            logger.debug("Discarding stale health verdict (cache was reset)")
            return
        self._state = AvailabilityState.AVAILABLE
        self._last_error = None
        logger.info("Backend CONNECTED at %s (ConvLSTM model loaded)", self.base_url)

    async def _request_health(self) -> None:
        """Raise a taxonomy error unless the backend is up and ready."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                # httpx timeouts bound each read, not the whole response.
                response = await asyncio.wait_for(
                    client.get(f"{self.base_url}/health"), self.timeout,
                )
            except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
                raise NetworkUnavailable(f"health probe timed out after {self.timeout}s") from exc
            except httpx.HTTPError as exc:
                raise NetworkUnavailable(f"health probe failed: {exc}") from exc

        if not response.is_success:
            raise BackendNotReady(f"health returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponse("health body is not JSON") from exc

        if not isinstance(data, dict):
            raise MalformedResponse("health body is not a JSON object")
        if data.get("status") != "ok" or data.get("model_loaded") is not True:
            raise BackendNotReady(
                f"backend not ready (status={data.get('status')!r}, "
                f"model_loaded={data.get('model_loaded')!r})"
            )


def _describe_force(mock: Optional[bool]) -> str:
    if mock is None:
        return "auto-detect"
    return "mock" if mock else "live"
