"""
Heatwave API — Application entry point.

Bootstraps FastAPI, wires up middleware and rate limiting, and registers
route groups. The app is a thin JSON surface over the in-memory session:
zone loading, proximity filtering and the live/mock decision all live in
heatwave.services.

Run locally:
  uvicorn heatwave.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from heatwave.core.config import VERSION, settings
from heatwave.core.rate_limit import limiter
from heatwave.routes.health import router as health_router
from heatwave.routes.session import router as session_router
from heatwave.routes.zones import router as zones_router

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup/shutdown. The upstream is probed lazily on first fetch."""
    logger.info(
        "Starting Heatwave API (env: %s, upstream: %s, force mock: %s)",
        settings.environment, settings.upstream_base_url, settings.force_mock_mode,
    )
    yield
    logger.info("Shutting down Heatwave API")


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Heatwave API",
    description=(
        "Heat-risk zones near the user, from the ConvLSTM prediction service "
        "when it is up and from synthetic data when it is not."
    ),
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(zones_router)
app.include_router(session_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "Heatwave API",
        "version": VERSION,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
