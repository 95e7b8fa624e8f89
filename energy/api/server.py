"""FastAPI application — initialisation, middleware, lifecycle events."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .dependencies import dependencies_ready, init_dependencies, shutdown_dependencies
from .routes import alerts, analytics, buildings, energy_data, health, metrics, reports, weather
from ..analysis.errors import AnalysisError
from ..telemetry import get_logger


# ------------------------------------------------------------------
# Lifespan (startup / shutdown)
# ------------------------------------------------------------------

@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: init DB & singletons unless already configured.  Shutdown: cleanup."""
    if not dependencies_ready():
        init_dependencies()
    yield
    shutdown_dependencies()


# ------------------------------------------------------------------
# Application
# ------------------------------------------------------------------

app = FastAPI(
    title="Building Energy Monitor API",
    version="1.0.0",
    description="Energy readings, weather-normalised analytics, alerts and reports.",
    lifespan=_lifespan,
)


# ------------------------------------------------------------------
# Middleware
# ------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_logger = get_logger("energy.api")


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Log every request with method, path, status, and duration."""
    start = time.monotonic()
    correlation_id = request.headers.get("X-Correlation-ID", "")
    try:
        response = await call_next(request)
    except Exception:
        _logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path,
            extra={"correlation_id": correlation_id, "path": request.url.path},
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
    elapsed = round((time.monotonic() - start) * 1000, 2)
    _logger.info(
        "%s %s → %s  (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
        extra={"correlation_id": correlation_id, "path": request.url.path},
    )
    if correlation_id:
        response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ------------------------------------------------------------------
# Routers
# ------------------------------------------------------------------

app.include_router(energy_data.router, prefix="/api/v1/energy-data")
app.include_router(weather.router, prefix="/api/v1/weather")
app.include_router(analytics.router, prefix="/api/v1/analytics")
app.include_router(alerts.router, prefix="/api/v1/alerts")
app.include_router(buildings.router, prefix="/api/v1/buildings")
app.include_router(reports.router, prefix="/api/v1/reports")
app.include_router(metrics.router, prefix="/api/v1/metrics")
app.include_router(health.router, prefix="/api/v1/health")
