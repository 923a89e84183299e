"""
Stellar Likes API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Initialise DB connection pool (TiDB)
  3. Create tables if not present
  4. Expose Prometheus /metrics endpoint
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from app.config import settings
from app.database import close_db, init_db
from app.telemetry import setup_tracing, instrument_app
from app.routers import likes, rankings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of the DB pool."""
    logger.info("Starting Stellar Likes API (env=%s)", settings.environment)

    await init_db()

    logger.info("Database connected. API ready.")
    yield

    logger.info("Shutting down...")
    await close_db()


app = FastAPI(
    title="Stellar Likes API",
    description=(
        "Likes on stellar systems and like leaderboards over calendar "
        "windows (week / month / year / all-time) or a random selection."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(rankings.router, prefix="/likes", tags=["Rankings"])
app.include_router(likes.router, prefix="/likes", tags=["Likes"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
# Mounted at /metrics — scraped by Prometheus
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
