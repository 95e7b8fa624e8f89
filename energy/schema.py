"""Pydantic v2 schemas for readings, buildings, weather, analytics and reports.

Every model uses ``model_config = ConfigDict(frozen=True)`` for immutability.
"""

from __future__ import annotations

import math
import uuid
import datetime as dt
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ReportFormat(str, Enum):
    """Supported export formats."""
    CSV = "csv"
    PDF = "pdf"


class TrendDirection(str, Enum):
    """Direction of a metric trend."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class AlertType(str, Enum):
    ANOMALY = "anomaly"
    HIGH_USAGE = "high_usage"
    COST = "cost"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


BUILDING_TYPES = (
    "Office", "Retail", "Warehouse", "Manufacturing", "Healthcare",
    "Education", "Hospitality", "Residential", "Mixed Use",
)
CURRENCIES = {"EUR": "€", "USD": "$", "GBP": "£", "CHF": "CHF"}


# ---------------------------------------------------------------------------
# Energy readings
# ---------------------------------------------------------------------------

class EnergyReadingIn(BaseModel):
    """A reading submitted by a client (JSON body or CSV row)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime
    kwh: float = Field(alias="kWh")
    cost: float
    co2: float = 0.0
    source: str = "API Upload"

    @field_validator("kwh", "cost", "co2")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v

    @field_validator("co2", mode="before")
    @classmethod
    def _co2_default(cls, v: object) -> object:
        return 0.0 if v in (None, "") else v

    @field_validator("source", mode="before")
    @classmethod
    def _source_default(cls, v: object) -> object:
        return "API Upload" if not v else v


class EnergyReadingOut(BaseModel):
    """A stored reading as returned by the API."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    building_id: Optional[int] = None
    timestamp: datetime
    kwh: float = Field(serialization_alias="kWh")
    cost: float
    co2: float
    source: str


class ReadingsSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_records: int = 0
    total_kwh: float = 0.0
    total_cost: float = 0.0
    total_co2: float = 0.0
    avg_kwh: float = 0.0
    date_range: Optional[Dict[str, datetime]] = None


# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------

class NotificationSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    anomaly_alerts: bool = True
    monthly_reports: bool = True
    maintenance_reminders: bool = True
    cost_thresholds: bool = True


class AlertThresholds(BaseModel):
    model_config = ConfigDict(frozen=True)

    high_usage_alert: float = Field(default=300.0, ge=0.0)
    cost_alert: float = Field(default=50.0, ge=0.0)
    anomaly_score: float = Field(default=0.7, ge=0.0, le=1.0)


class BuildingSettings(BaseModel):
    """Editable building settings with the same checks as the settings form."""
    model_config = ConfigDict(frozen=True)

    name: str = "Main Office Building"
    address: str = "Potsdamer Platz 1, 10785 Berlin, Germany"
    latitude: float = 52.5096
    longitude: float = 13.3765
    floor_area: float = 2500.0
    building_type: str = "Office"
    construction_year: int = 2010
    heating_system: str = "Gas Boiler"
    cooling_system: str = "Electric AC"
    energy_tariff: float = 0.12
    co2_factor: float = 0.4
    weather_station: str = "10637"
    timezone: str = "Europe/Berlin"
    currency: str = "EUR"
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    thresholds: AlertThresholds = Field(default_factory=AlertThresholds)

    @field_validator("name", "address")
    @classmethod
    def _required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("is required")
        return v.strip()

    @field_validator("latitude")
    @classmethod
    def _latitude(cls, v: float) -> float:
        if v < -90 or v > 90:
            raise ValueError("Latitude must be between -90 and 90")
        return v

    @field_validator("longitude")
    @classmethod
    def _longitude(cls, v: float) -> float:
        if v < -180 or v > 180:
            raise ValueError("Longitude must be between -180 and 180")
        return v

    @field_validator("floor_area")
    @classmethod
    def _floor_area(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Floor area must be greater than 0")
        return v

    @field_validator("construction_year")
    @classmethod
    def _construction_year(cls, v: int) -> int:
        if v < 1800 or v > datetime.now(timezone.utc).year:
            raise ValueError("Invalid construction year")
        return v

    @field_validator("energy_tariff")
    @classmethod
    def _tariff(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Energy tariff must be greater than 0")
        return v

    @field_validator("co2_factor")
    @classmethod
    def _co2_factor(cls, v: float) -> float:
        if v < 0:
            raise ValueError("CO2 factor cannot be negative")
        return v

    @field_validator("currency")
    @classmethod
    def _currency(cls, v: str) -> str:
        if v.upper() not in CURRENCIES:
            raise ValueError(f"currency must be one of {sorted(CURRENCIES)}")
        return v.upper()


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

class WeatherDay(BaseModel):
    """One day of processed weather data."""
    model_config = ConfigDict(frozen=True)

    date: date
    avg_temp: float = 0.0
    min_temp: float = 0.0
    max_temp: float = 0.0
    precipitation: float = 0.0
    wind_speed: float = 0.0
    pressure: float = 0.0
    heating_degree_days: float = Field(default=0.0, ge=0.0)
    cooling_degree_days: float = Field(default=0.0, ge=0.0)


class WeatherSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_days: int = 0
    avg_temperature: Optional[float] = None
    total_precipitation: float = 0.0
    total_heating_degree_days: float = 0.0
    total_cooling_degree_days: float = 0.0
    min_temperature: Optional[float] = None
    max_temperature: Optional[float] = None


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

class DailyAnalytics(BaseModel):
    """One row of the analytics table."""
    model_config = ConfigDict(frozen=True)

    date: date
    kwh: float
    cost: float
    co2: float = 0.0
    avg_temp: Optional[float] = None
    heating_degree_days: Optional[float] = None
    cooling_degree_days: Optional[float] = None
    normalized_usage: Optional[float] = None
    is_anomaly: bool = False
    anomaly_score: float = Field(default=0.0, ge=0.0, le=1.0)


class AnalyticsResult(BaseModel):
    """Daily analytics plus the statistics derived from them."""
    model_config = ConfigDict(frozen=True)

    rows: List[DailyAnalytics] = Field(default_factory=list)
    baseline_kwh: Optional[float] = None
    anomaly_count: int = 0
    anomaly_threshold: float = 20.0
    temperature_correlation: Optional[float] = None
    correlation_strength: str = "undefined"
    degree_day_slope: Optional[float] = None
    base_load_kwh: Optional[float] = None
    avg_normalized_usage: Optional[float] = None


class TrendResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_name: str
    direction: TrendDirection = TrendDirection.STABLE
    slope: float = 0.0
    r_squared: float = 0.0
    data_points: int = 0
    values: List[float] = Field(default_factory=list)
    dates: List[date] = Field(default_factory=list)


class KPICard(BaseModel):
    """Single KPI for the dashboard."""
    model_config = ConfigDict(frozen=True)

    label: str
    value: float
    display: str
    unit: str = ""
    change_pct: float = 0.0
    trend: TrendDirection = TrendDirection.STABLE


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

class AlertRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    building_id: Optional[int] = None
    alert_type: AlertType
    severity: AlertSeverity = AlertSeverity.WARNING
    message: str = ""
    value: float = 0.0
    threshold: float = 0.0
    date: Optional[dt.date] = None


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class PeriodTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_energy: float = 0.0
    total_cost: float = 0.0
    total_co2: float = 0.0
    days: int = Field(default=0, ge=0)
    avg_daily_usage: float = 0.0
    peak_usage: float = 0.0
    weather_normalized_usage: Optional[float] = None


class PeriodComparison(BaseModel):
    """Percentage change of the current period against the previous one."""
    model_config = ConfigDict(frozen=True)

    energy_change: float = 0.0
    cost_change: float = 0.0
    co2_change: float = 0.0


class MonthlyBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str  # YYYY-MM
    label: str  # "Jan 2025"
    energy: float = 0.0
    cost: float = 0.0
    co2: float = 0.0
    efficiency: Optional[float] = None


class ReportMetadata(BaseModel):
    """Metadata about the generated report itself."""
    model_config = ConfigDict(frozen=True)

    report_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    building_name: str = ""
    period_start: date
    period_end: date
    currency: str = "EUR"
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @model_validator(mode="after")
    def _ordered_period(self) -> "ReportMetadata":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not precede period_start")
        return self


class EnergyReport(BaseModel):
    """Complete period report."""
    model_config = ConfigDict(frozen=True)

    metadata: ReportMetadata
    current: PeriodTotals = Field(default_factory=PeriodTotals)
    previous: PeriodTotals = Field(default_factory=PeriodTotals)
    comparison: PeriodComparison = Field(default_factory=PeriodComparison)
    monthly: List[MonthlyBreakdown] = Field(default_factory=list)
    anomaly_count: int = Field(default=0, ge=0)
    temperature_correlation: Optional[float] = None
    visualizations: Dict[str, str] = Field(default_factory=dict)
