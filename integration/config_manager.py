"""Configuration management — load, validate, merge YAML + env vars.

Uses Pydantic v2 for schema validation and PyYAML for file parsing.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from energy.config import EnergyConfig
from energy.schema import CURRENCIES


# ── Pydantic settings models ───────────────────────────────────────


class SystemSettings(BaseModel):
    """Top-level system settings."""

    model_config = ConfigDict(frozen=True)

    project_name: str = "Building Energy Monitor"
    version: str = "1.0.0"
    log_level: str = "INFO"
    correlation_id_header: str = "X-Correlation-ID"

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        upper = v.upper()
        if upper not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}, got '{v}'")
        return upper


class DatabaseSettings(BaseModel):
    model_config = ConfigDict(frozen=True)
    url: str = "sqlite:///energy.db"


class TariffSettings(BaseModel):
    """Default pricing and emission factors."""

    model_config = ConfigDict(frozen=True)

    energy_tariff: float = 0.12
    co2_factor: float = 0.4
    currency: str = "EUR"


class AnalyticsSettings(BaseModel):
    model_config = ConfigDict(frozen=True)
    anomaly_threshold: float = 20.0
    degree_day_base: float = 18.0
    analytics_days: int = 90
    upload_preview_rows: int = 5


class WeatherSettings(BaseModel):
    model_config = ConfigDict(frozen=True)
    station: str = "10637"
    api_key: Optional[str] = None
    timeout_seconds: float = 10.0


class ReportingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)
    default_formats: List[str] = Field(default_factory=lambda: ["csv", "pdf"])
    output_directory: str = "reports"
    include_charts: bool = True
    chart_width: int = 800
    chart_height: int = 400
    chart_dpi: int = 100


class APISettings(BaseModel):
    model_config = ConfigDict(frozen=True)
    host: str = "0.0.0.0"
    port: int = 8000


# ── Top-level config ───────────────────────────────────────────────


class SystemConfig(BaseModel):
    """Complete application configuration."""

    model_config = ConfigDict(frozen=True)

    system: SystemSettings = Field(default_factory=SystemSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    tariffs: TariffSettings = Field(default_factory=TariffSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    weather: WeatherSettings = Field(default_factory=WeatherSettings)
    reporting: ReportingSettings = Field(default_factory=ReportingSettings)
    api: APISettings = Field(default_factory=APISettings)

    def to_energy_config(self) -> EnergyConfig:
        """Flatten into the :class:`EnergyConfig` used by the ``energy`` package."""
        return EnergyConfig(
            database_url=self.database.url,
            energy_tariff=self.tariffs.energy_tariff,
            co2_factor=self.tariffs.co2_factor,
            currency=self.tariffs.currency,
            anomaly_threshold=self.analytics.anomaly_threshold,
            degree_day_base=self.analytics.degree_day_base,
            analytics_days=self.analytics.analytics_days,
            upload_preview_rows=self.analytics.upload_preview_rows,
            weather_station=self.weather.station,
            meteostat_api_key=self.weather.api_key,
            meteostat_timeout=self.weather.timeout_seconds,
            chart_width=self.reporting.chart_width,
            chart_height=self.reporting.chart_height,
            chart_dpi=self.reporting.chart_dpi,
            include_charts=self.reporting.include_charts,
            output_dir=self.reporting.output_directory,
        )


# ── ConfigManager ──────────────────────────────────────────────────

# Environment variable → config path mapping.
_ENV_MAP: Dict[str, str] = {
    "ENERGY_LOG_LEVEL": "system.log_level",
    "ENERGY_DATABASE_URL": "database.url",
    "ENERGY_TARIFF": "tariffs.energy_tariff",
    "ENERGY_CO2_FACTOR": "tariffs.co2_factor",
    "ENERGY_CURRENCY": "tariffs.currency",
    "ENERGY_ANOMALY_THRESHOLD": "analytics.anomaly_threshold",
    "ENERGY_WEATHER_STATION": "weather.station",
    "METEOSTAT_API_KEY": "weather.api_key",
    "ENERGY_API_PORT": "api.port",
    "ENERGY_OUTPUT_DIR": "reporting.output_directory",
}

_FLOAT_KEYS = {"energy_tariff", "co2_factor", "anomaly_threshold"}


class ConfigManager:
    """Load, validate, and merge configuration from YAML + env vars."""

    @staticmethod
    def load(config_path: str = "config.yaml") -> SystemConfig:
        """Load config from *config_path*, validate, merge env vars.

        A missing file yields the defaults.

        Args:
            config_path: Path to the YAML configuration file.

        Returns:
            Validated :class:`SystemConfig`.

        Raises:
            yaml.YAMLError: If the file contains invalid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as fh:
                raw: Dict[str, Any] = yaml.safe_load(fh) or {}
        else:
            raw = {}

        config = SystemConfig.model_validate(raw)
        config = ConfigManager.merge_env_vars(config)
        return config

    @staticmethod
    def validate(config: SystemConfig) -> List[str]:
        """Return a list of human-readable validation issues.

        An empty list means the config is valid.
        """
        issues: List[str] = []

        if config.tariffs.energy_tariff <= 0:
            issues.append("tariffs.energy_tariff must be > 0")
        if config.tariffs.co2_factor < 0:
            issues.append("tariffs.co2_factor cannot be negative")
        if config.tariffs.currency not in CURRENCIES:
            issues.append(
                f"tariffs.currency must be one of {sorted(CURRENCIES)}",
            )
        if config.analytics.anomaly_threshold < 0:
            issues.append("analytics.anomaly_threshold must be >= 0")
        if config.analytics.analytics_days < 1:
            issues.append("analytics.analytics_days must be >= 1")
        if not config.database.url:
            issues.append("database.url is required")
        if config.api.port <= 0:
            issues.append("api.port must be a positive integer")
        for fmt in config.reporting.default_formats:
            if fmt.lower() not in {"csv", "pdf"}:
                issues.append(f"reporting.default_formats contains unknown format '{fmt}'")
        if config.reporting.chart_dpi < 50:
            issues.append("reporting.chart_dpi must be >= 50")

        return issues

    @staticmethod
    def merge_env_vars(config: SystemConfig) -> SystemConfig:
        """Override config values from environment variables.

        Returns a **new** frozen :class:`SystemConfig` with overrides
        applied.
        """
        overrides: Dict[str, Any] = {}

        for env_key, config_path in _ENV_MAP.items():
            value = os.environ.get(env_key)
            if value is None or value == "":
                continue

            parts = config_path.split(".")
            d = overrides
            for p in parts[:-1]:
                d = d.setdefault(p, {})

            # Coerce types
            if parts[-1] == "port":
                d[parts[-1]] = int(value)
            elif parts[-1] in _FLOAT_KEYS:
                d[parts[-1]] = float(value)
            else:
                d[parts[-1]] = value

        if not overrides:
            return config

        # Deep-merge overrides into the existing dump
        base = config.model_dump()
        _deep_merge(base, overrides)
        return SystemConfig.model_validate(base)

    @staticmethod
    def get_default_config() -> SystemConfig:
        """Return a :class:`SystemConfig` with all defaults."""
        return SystemConfig()

    @staticmethod
    def save(config: SystemConfig, path: str) -> None:
        """Dump *config* to a YAML file at *path*.

        The Meteostat API key is never written to disk.
        """
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        data = config.model_dump()
        data["weather"]["api_key"] = None
        with open(out, "w", encoding="utf-8") as fh:
            yaml.dump(
                data,
                fh,
                default_flow_style=False,
                sort_keys=False,
            )


# ── helpers ────────────────────────────────────────────────────────


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge *overrides* into *base* (mutating)."""
    for k, v in overrides.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
