"""API-specific Pydantic v2 request / response models."""

from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..schema import (
    AlertThresholds,
    BuildingSettings,
    DailyAnalytics,
    EnergyReadingOut,
    KPICard,
    NotificationSettings,
    ReadingsSummary,
    TrendResult,
    WeatherDay,
    WeatherSummary,
)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class EnergyDataCreateRequest(BaseModel):
    """POST /api/v1/energy-data request body.

    Items are validated one by one in the route so that a malformed record
    yields a 400 naming its index.
    """
    model_config = ConfigDict(frozen=True)

    data: Optional[List[Dict[str, Any]]] = None
    building_id: Optional[int] = None


class StationSearchRequest(BaseModel):
    """POST /api/v1/weather/stations request body."""
    model_config = ConfigDict(frozen=True)

    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    limit: int = Field(default=10, ge=1, le=100)


class GenerateReportRequest(BaseModel):
    """POST /api/v1/reports/generate request body."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    building_id: Optional[int] = None
    formats: List[str] = Field(
        default=["csv"],
        description="Output formats (csv, pdf).",
    )


class EvaluateAlertsRequest(BaseModel):
    """POST /api/v1/alerts/evaluate request body."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    building_id: Optional[int] = None
    persist: bool = True


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class EnergyDataResponse(BaseModel):
    """GET /api/v1/energy-data response."""
    model_config = ConfigDict(frozen=True)

    data: List[EnergyReadingOut] = Field(default_factory=list)
    summary: ReadingsSummary = Field(default_factory=ReadingsSummary)


class EnergyDataCreateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = "Energy data uploaded successfully"
    records_created: int = 0
    total_submitted: int = 0


class DeleteResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    deleted_count: int = 0


class UploadResponse(BaseModel):
    """POST /api/v1/energy-data/upload response."""
    model_config = ConfigDict(frozen=True)

    records_created: int = 0
    total_valid: int = 0
    errors: List[str] = Field(default_factory=list)
    preview: List[Dict[str, Any]] = Field(default_factory=list)


class WeatherResponse(BaseModel):
    """GET /api/v1/weather response."""
    model_config = ConfigDict(frozen=True)

    data: List[WeatherDay] = Field(default_factory=list)
    summary: WeatherSummary = Field(default_factory=WeatherSummary)
    station: str
    date_range: Dict[str, date]


class StationsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    stations: List[Dict[str, Any]] = Field(default_factory=list)
    location: Dict[str, float]


class AnalyticsResponse(BaseModel):
    """GET /api/v1/analytics/daily response."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    rows: List[DailyAnalytics] = Field(default_factory=list)
    baseline_kwh: Optional[float] = None
    anomaly_count: int = 0
    anomaly_threshold: float = 20.0
    temperature_correlation: Optional[float] = None
    correlation_strength: str = "undefined"
    degree_day_slope: Optional[float] = None
    base_load_kwh: Optional[float] = None


class TrendsResponse(BaseModel):
    """GET /api/v1/analytics/trends response."""
    model_config = ConfigDict(frozen=True)

    trends: Dict[str, TrendResult] = Field(default_factory=dict)


class DashboardResponse(BaseModel):
    """GET /api/v1/analytics/dashboard response."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    kpis: List[KPICard] = Field(default_factory=list)
    anomaly_count: int = 0
    temperature_correlation: Optional[float] = None


class BuildingResponse(BuildingSettings):
    """A stored building."""
    model_config = ConfigDict(frozen=True)

    id: int
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    thresholds: AlertThresholds = Field(default_factory=AlertThresholds)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AlertResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    building_id: Optional[int] = None
    alert_type: str
    severity: str
    message: str = ""
    value: float = 0.0
    threshold: float = 0.0
    date: Optional[dt.date] = None
    acknowledged: bool = False
    created_at: Optional[datetime] = None


class EvaluateAlertsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    alerts_raised: int = 0
    alert_ids: List[int] = Field(default_factory=list)
    alerts: List[Dict[str, Any]] = Field(default_factory=list)


class GenerateReportResponse(BaseModel):
    """POST /api/v1/reports/generate response."""
    model_config = ConfigDict(frozen=True)

    report_id: str
    period_start: date
    period_end: date
    formats: List[str]
    files: Dict[str, str] = Field(default_factory=dict)
    report: Dict[str, Any] = Field(default_factory=dict)


class ReportMetadataResponse(BaseModel):
    """GET /api/v1/reports/{report_id} response."""
    model_config = ConfigDict(frozen=True)

    report_id: str
    period_start: str
    period_end: str
    generated_at: str
    formats: List[str]
    files: Dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """GET /api/v1/health response."""
    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    database: str = "connected"
    version: str = "1.0.0"
    uptime: float = 0.0
