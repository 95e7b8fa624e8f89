"""Prometheus metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ...telemetry import registry

router = APIRouter(tags=["metrics"])


@router.get(
    "/prometheus",
    response_class=PlainTextResponse,
    summary="Prometheus metrics",
)
def prometheus_metrics() -> PlainTextResponse:
    """Export the energy metrics registry in text exposition format."""
    return PlainTextResponse(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
