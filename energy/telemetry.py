"""Structured JSON logging and Prometheus metrics for the energy backend."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from prometheus_client import CollectorRegistry, Counter, Histogram


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

class _JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "correlation_id"):
            payload["correlation_id"] = record.correlation_id
        if hasattr(record, "path"):
            payload["path"] = record.path
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured with JSON output.

    Args:
        name: Logger name (usually ``__name__``).

    Returns:
        Configured :class:`logging.Logger`.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


# ---------------------------------------------------------------------------
# Prometheus metrics
# ---------------------------------------------------------------------------

registry = CollectorRegistry()

readings_ingested_total = Counter(
    "energy_readings_ingested_total",
    "Energy readings stored",
    labelnames=["source"],
    registry=registry,
)
anomalies_detected_total = Counter(
    "energy_anomalies_detected_total",
    "Anomalous days in generated reports",
    registry=registry,
)
report_generation_seconds = Histogram(
    "energy_report_generation_seconds",
    "Time to render a report",
    labelnames=["format"],
    registry=registry,
)
reports_generated_total = Counter(
    "energy_reports_generated_total",
    "Total reports generated",
    labelnames=["format"],
    registry=registry,
)
database_operations_total = Counter(
    "energy_database_operations_total",
    "Total database operations",
    labelnames=["operation"],
    registry=registry,
)
weather_requests_total = Counter(
    "energy_weather_requests_total",
    "Requests sent to the weather service",
    labelnames=["endpoint", "outcome"],
    registry=registry,
)
