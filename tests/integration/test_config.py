"""Tests for integration.config_manager — YAML + env var config loading."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from integration.config_manager import (
    ConfigManager,
    SystemConfig,
    SystemSettings,
    TariffSettings,
    _deep_merge,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "ENERGY_LOG_LEVEL", "ENERGY_DATABASE_URL", "ENERGY_TARIFF", "ENERGY_CO2_FACTOR",
        "ENERGY_CURRENCY", "ENERGY_ANOMALY_THRESHOLD", "ENERGY_WEATHER_STATION",
        "METEOSTAT_API_KEY", "ENERGY_API_PORT", "ENERGY_OUTPUT_DIR",
    ):
        monkeypatch.delenv(key, raising=False)


# ── SystemConfig defaults ──────────────────────────────────────────


class TestSystemConfigDefaults:
    def test_default_instantiation(self) -> None:
        cfg = SystemConfig()
        assert cfg.system.log_level == "INFO"
        assert cfg.system.project_name == "Building Energy Monitor"
        assert cfg.database.url == "sqlite:///energy.db"

    def test_default_tariffs(self) -> None:
        cfg = SystemConfig()
        assert cfg.tariffs.energy_tariff == 0.12
        assert cfg.tariffs.co2_factor == 0.4
        assert cfg.tariffs.currency == "EUR"

    def test_default_analytics(self) -> None:
        cfg = SystemConfig()
        assert cfg.analytics.anomaly_threshold == 20.0
        assert cfg.analytics.degree_day_base == 18.0
        assert cfg.analytics.analytics_days == 90

    def test_default_reporting(self) -> None:
        cfg = SystemConfig()
        assert cfg.reporting.default_formats == ["csv", "pdf"]
        assert cfg.weather.station == "10637"
        assert cfg.weather.api_key is None

    def test_frozen(self) -> None:
        cfg = SystemConfig()
        with pytest.raises(ValidationError):
            cfg.tariffs.currency = "USD"  # type: ignore[misc]


class TestLogLevelValidator:
    def test_lowercase_normalised(self) -> None:
        assert SystemSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SystemSettings(log_level="LOUD")


# ── Loading ────────────────────────────────────────────────────────


class TestLoad:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        cfg = ConfigManager.load(str(tmp_path / "absent.yaml"))
        assert cfg == SystemConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert ConfigManager.load(str(path)) == SystemConfig()

    def test_partial_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            textwrap.dedent("""\
                tariffs:
                  energy_tariff: 0.31
                  currency: GBP
                analytics:
                  anomaly_threshold: 15
            """),
            encoding="utf-8",
        )
        cfg = ConfigManager.load(str(path))
        assert cfg.tariffs.energy_tariff == 0.31
        assert cfg.tariffs.currency == "GBP"
        assert cfg.tariffs.co2_factor == 0.4
        assert cfg.analytics.anomaly_threshold == 15.0

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("tariffs: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            ConfigManager.load(str(path))


# ── Environment overrides ──────────────────────────────────────────


class TestEnvOverrides:
    def test_float_and_string(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENERGY_TARIFF", "0.25")
        monkeypatch.setenv("ENERGY_CURRENCY", "USD")
        cfg = ConfigManager.merge_env_vars(SystemConfig())
        assert cfg.tariffs.energy_tariff == 0.25
        assert cfg.tariffs.currency == "USD"

    def test_api_key_and_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("METEOSTAT_API_KEY", "secret")
        monkeypatch.setenv("ENERGY_API_PORT", "9100")
        cfg = ConfigManager.merge_env_vars(SystemConfig())
        assert cfg.weather.api_key == "secret"
        assert cfg.api.port == 9100

    def test_env_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("analytics:\n  anomaly_threshold: 15\n", encoding="utf-8")
        monkeypatch.setenv("ENERGY_ANOMALY_THRESHOLD", "30")
        assert ConfigManager.load(str(path)).analytics.anomaly_threshold == 30.0

    def test_empty_value_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENERGY_CURRENCY", "")
        base = SystemConfig()
        assert ConfigManager.merge_env_vars(base) is base


# ── Validation ─────────────────────────────────────────────────────


class TestValidate:
    def test_defaults_are_valid(self) -> None:
        assert ConfigManager.validate(SystemConfig()) == []

    def test_reports_each_issue(self) -> None:
        cfg = SystemConfig.model_validate({
            "tariffs": {"energy_tariff": 0, "co2_factor": -1, "currency": "XYZ"},
            "analytics": {"analytics_days": 0},
            "reporting": {"default_formats": ["csv", "html"], "chart_dpi": 10},
        })
        issues = ConfigManager.validate(cfg)
        joined = "\n".join(issues)
        assert "tariffs.energy_tariff" in joined
        assert "tariffs.co2_factor" in joined
        assert "tariffs.currency" in joined
        assert "analytics.analytics_days" in joined
        assert "'html'" in joined
        assert "chart_dpi" in joined
        assert len(issues) == 6


# ── Save / round trip ──────────────────────────────────────────────


class TestSave:
    def test_round_trip(self, tmp_path: Path) -> None:
        cfg = SystemConfig(tariffs=TariffSettings(energy_tariff=0.2, currency="CHF"))
        path = tmp_path / "nested" / "config.yaml"
        ConfigManager.save(cfg, str(path))
        assert ConfigManager.load(str(path)) == cfg

    def test_api_key_not_written(self, tmp_path: Path) -> None:
        cfg = SystemConfig.model_validate({"weather": {"api_key": "secret"}})
        path = tmp_path / "config.yaml"
        ConfigManager.save(cfg, str(path))
        assert "secret" not in path.read_text(encoding="utf-8")
        assert ConfigManager.load(str(path)).weather.api_key is None


# ── Helpers ────────────────────────────────────────────────────────


class TestDeepMerge:
    def test_nested(self) -> None:
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        _deep_merge(base, {"a": {"y": 20}, "c": 4})
        assert base == {"a": {"x": 1, "y": 20}, "b": 3, "c": 4}

    def test_scalar_replaces_dict(self) -> None:
        base = {"a": {"x": 1}}
        _deep_merge(base, {"a": 5})
        assert base == {"a": 5}


class TestToEnergyConfig:
    def test_flattens_sections(self) -> None:
        cfg = SystemConfig.model_validate({
            "database": {"url": "sqlite:///:memory:"},
            "tariffs": {"energy_tariff": 0.3, "currency": "USD"},
            "analytics": {"anomaly_threshold": 12.5},
            "weather": {"station": "10384", "api_key": "k"},
            "reporting": {"output_directory": "out", "include_charts": False},
        })
        energy = cfg.to_energy_config()
        assert energy.database_url == "sqlite:///:memory:"
        assert energy.energy_tariff == 0.3
        assert energy.currency == "USD"
        assert energy.anomaly_threshold == 12.5
        assert energy.weather_station == "10384"
        assert energy.meteostat_api_key == "k"
        assert energy.output_dir == "out"
        assert energy.include_charts is False
