"""Health-check endpoint."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends

from ..dependencies import get_db
from ..models import HealthResponse
from ...database.connection import DatabaseConnection

router = APIRouter(tags=["health"])

_start_time = time.monotonic()


@router.get(
    "/",
    response_model=HealthResponse,
    summary="Service health check",
)
def health(db: DatabaseConnection = Depends(get_db)) -> HealthResponse:
    """Return service health, database status, version, and uptime."""
    db_status = "connected" if db.ping() else "disconnected"
    return HealthResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
        version="1.0.0",
        uptime=round(time.monotonic() - _start_time, 2),
    )
