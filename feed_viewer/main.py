"""
Feed Viewer API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Open the MongoDB handle and ping it
  3. Expose Prometheus /metrics endpoint

Shutdown closes the MongoDB handle.
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from feed_viewer.config import settings
from feed_viewer.database import DocumentStore
from feed_viewer.errors import UpstreamUnavailable
from feed_viewer.routers import feeds
from feed_viewer.telemetry import instrument_app, setup_tracing

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the document store for the lifetime of the process."""
    logger.info("Starting Feed Viewer API (env=%s)", settings.environment)

    store = DocumentStore(settings)
    await store.start()
    app.state.store = store

    logger.info("MongoDB connected. API ready.")
    yield

    logger.info("Shutting down...")
    await store.stop()


app = FastAPI(
    title="Feed Viewer API",
    description=(
        "Read-through views over the ranking pipeline: raw feed samples, "
        "ranked feeds and re-ranked layout variants, with image URLs and "
        "colors resolved."
    ),
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(UpstreamUnavailable)
async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailable):
    logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(feeds.router, prefix="/feeds", tags=["Feeds"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health(request: Request):
    store: DocumentStore | None = getattr(request.app.state, "store", None)
    mongodb_ok = store is not None and await store.ping()
    return {
        "status": "ok" if mongodb_ok else "degraded",
        "service": settings.service_name,
        "mongodb": mongodb_ok,
    }
