"""Energy monitor configuration — frozen dataclass with sensible defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class EnergyConfig:
    """Immutable configuration for the energy monitoring backend.

    Attributes:
        database_url: SQLAlchemy connection string.
        energy_tariff: Default price per kWh used when a reading has no cost.
        co2_factor: Default kg CO2 emitted per kWh.
        currency: ISO currency code shown in reports.
        anomaly_threshold: Relative deviation (percent) above which a daily
            reading is flagged.
        degree_day_base: Base temperature (°C) for heating/cooling degree days.
        weather_station: Default Meteostat station id.
        meteostat_api_key: RapidAPI key for Meteostat (``None`` disables it).
        meteostat_timeout: HTTP timeout in seconds for weather requests.
        analytics_days: Default lookback window for analytics endpoints.
        upload_preview_rows: Number of rows returned as CSV upload preview.
        chart_width: Chart width in pixels.
        chart_height: Chart height in pixels.
        chart_dpi: Chart resolution in DPI.
        include_charts: Whether to embed charts in PDF reports.
        output_dir: Path to write generated reports.
    """

    # Database ----------------------------------------------------------------
    database_url: str = "sqlite:///energy.db"

    # Tariffs -----------------------------------------------------------------
    energy_tariff: float = 0.12
    co2_factor: float = 0.4
    currency: str = "EUR"

    # Analytics ---------------------------------------------------------------
    anomaly_threshold: float = 20.0
    degree_day_base: float = 18.0
    analytics_days: int = 90
    upload_preview_rows: int = 5

    # Weather -----------------------------------------------------------------
    weather_station: str = "10637"
    meteostat_api_key: Optional[str] = field(
        default_factory=lambda: os.environ.get("METEOSTAT_API_KEY") or None,
    )
    meteostat_timeout: float = 10.0

    # Charts ------------------------------------------------------------------
    chart_width: int = 800
    chart_height: int = 400
    chart_dpi: int = 100
    include_charts: bool = True

    # Paths -------------------------------------------------------------------
    output_dir: str = field(
        default_factory=lambda: os.path.join(
            os.path.dirname(__file__), "..", "reports",
        ),
    )

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.energy_tariff <= 0:
            raise ValueError("energy_tariff must be > 0")
        if self.co2_factor < 0:
            raise ValueError("co2_factor cannot be negative")
        if self.anomaly_threshold < 0:
            raise ValueError("anomaly_threshold must be >= 0")
        if self.analytics_days < 1:
            raise ValueError("analytics_days must be >= 1")
        if self.chart_dpi < 50:
            raise ValueError("chart_dpi must be >= 50")
