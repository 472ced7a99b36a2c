"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address.

Only the zone load endpoint is limited: each call may hold an upstream
ConvLSTM inference request open for up to 30 s.

Usage in routes:
    from fastapi import Request
    from heatwave.core.rate_limit import limiter

    @router.get("/zones")
    @limiter.limit(settings.zones_rate_limit)
    async def load_zones(request: Request, ...):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
