"""Tests for the Click CLI (main.py) via CliRunner."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from energy.weather.meteostat_client import WeatherServiceError
from main import cli


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("METEOSTAT_API_KEY", "ENERGY_DATABASE_URL", "ENERGY_OUTPUT_DIR", "ENERGY_CURRENCY"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def config_yaml(tmp_path: Path) -> str:
    """Write a config pointing at a throwaway SQLite file and report dir."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "system:\n  log_level: WARNING\n"
        f"database:\n  url: sqlite:///{tmp_path / 'energy.db'}\n"
        f"reporting:\n  output_directory: {tmp_path / 'reports'}\n"
        "  include_charts: false\n",
        encoding="utf-8",
    )
    return str(cfg)


@pytest.fixture()
def readings_csv(tmp_path: Path) -> str:
    """Twenty hourly-stamped days at 100 kWh with a 400 kWh spike on the 5th."""
    lines = ["timestamp,kWh,cost,co2,source"]
    for day in range(1, 21):
        kwh = 400 if day == 5 else 100
        lines.append(f"2025-01-{day:02d}T12:00:00Z,{kwh},{kwh * 0.12:.2f},{kwh * 0.4:.1f},Main Meter")
    path = tmp_path / "readings.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def _import(runner: CliRunner, config_yaml: str, csv_path: str):  # type: ignore[no-untyped-def]
    return runner.invoke(cli, ["--config", config_yaml, "import-csv", csv_path])


# ── Root group ─────────────────────────────────────────────────────


class TestCLIGroup:
    def test_help_flag(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(cli, ["--config", config_yaml, "--help"])
        assert result.exit_code == 0
        assert "Building Energy Monitor" in result.output

    def test_no_subcommand_shows_help(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(cli, ["--config", config_yaml])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version_option(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(cli, ["--config", config_yaml, "--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_broken_config_exits_2(self, runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("system:\n  log_level: LOUD\n", encoding="utf-8")
        result = runner.invoke(cli, ["--config", str(bad), "validate"])
        assert result.exit_code == 2


# ── validate ───────────────────────────────────────────────────────


class TestValidateCommand:
    def test_valid_config(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(cli, ["--config", config_yaml, "validate"])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_missing_file_uses_defaults(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--config", "/no/such/file.yaml", "validate"])
        assert result.exit_code == 0

    def test_invalid_currency(self, runner: CliRunner, tmp_path: Path) -> None:
        cfg = tmp_path / "config.yaml"
        cfg.write_text("tariffs:\n  currency: XYZ\n", encoding="utf-8")
        result = runner.invoke(cli, ["--config", str(cfg), "validate"])
        assert result.exit_code == 1
        assert "tariffs.currency" in result.output


# ── import-csv ─────────────────────────────────────────────────────


class TestImportCommand:
    def test_import(self, runner: CliRunner, config_yaml: str, readings_csv: str) -> None:
        result = _import(runner, config_yaml, readings_csv)
        assert result.exit_code == 0, result.output
        assert "Inserted" in result.output

    def test_reimport_skips_duplicates(
        self, runner: CliRunner, config_yaml: str, readings_csv: str,
    ) -> None:
        _import(runner, config_yaml, readings_csv)
        result = _import(runner, config_yaml, readings_csv)
        assert result.exit_code == 0
        assert "Duplicates: 20" in result.output

    def test_no_valid_rows(self, runner: CliRunner, config_yaml: str, tmp_path: Path) -> None:
        bad = tmp_path / "bad.csv"
        bad.write_text("timestamp,kWh,cost\nyesterday,1,1\n", encoding="utf-8")
        result = _import(runner, config_yaml, str(bad))
        assert result.exit_code == 1
        assert "Invalid timestamp format" in result.output

    def test_unknown_building(self, runner: CliRunner, config_yaml: str, readings_csv: str) -> None:
        result = runner.invoke(cli, ["--config", config_yaml, "import-csv", readings_csv, "-b", "7"])
        assert result.exit_code == 1


# ── analyze ────────────────────────────────────────────────────────


class TestAnalyzeCommand:
    def test_analyze(self, runner: CliRunner, config_yaml: str, readings_csv: str) -> None:
        _import(runner, config_yaml, readings_csv)
        result = runner.invoke(
            cli,
            ["--config", config_yaml, "analyze", "--start", "2025-01-01", "--end", "2025-01-20"],
        )
        assert result.exit_code == 0, result.output
        assert "Total Energy" in result.output
        assert "2025-01-05" in result.output

    def test_no_readings(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(
            cli,
            ["--config", config_yaml, "analyze", "--start", "2025-01-01", "--end", "2025-01-20"],
        )
        assert result.exit_code == 1
        assert "No readings" in result.output

    def test_bad_date(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(cli, ["--config", config_yaml, "analyze", "--start", "01/02/2025"])
        assert result.exit_code == 2
        assert "YYYY-MM-DD" in result.output

    def test_reversed_window(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(
            cli,
            ["--config", config_yaml, "analyze", "--start", "2025-02-01", "--end", "2025-01-01"],
        )
        assert result.exit_code == 1


# ── report ─────────────────────────────────────────────────────────


class TestReportCommand:
    def test_report_writes_files(
        self, runner: CliRunner, config_yaml: str, readings_csv: str, tmp_path: Path,
    ) -> None:
        _import(runner, config_yaml, readings_csv)
        result = runner.invoke(
            cli,
            [
                "--config", config_yaml, "report",
                "--start", "2025-01-01", "--end", "2025-01-20",
                "-f", "csv", "-f", "pdf",
            ],
        )
        assert result.exit_code == 0, result.output
        reports = tmp_path / "reports"
        assert len(list(reports.glob("energy-report-2025-01-01-to-2025-01-20-*.csv"))) == 1
        assert len(list(reports.glob("*.pdf"))) == 1

    def test_output_override(
        self, runner: CliRunner, config_yaml: str, readings_csv: str, tmp_path: Path,
    ) -> None:
        _import(runner, config_yaml, readings_csv)
        out = tmp_path / "elsewhere"
        result = runner.invoke(
            cli,
            [
                "--config", config_yaml, "report",
                "--start", "2025-01-01", "--end", "2025-01-20",
                "-f", "csv", "-o", str(out),
            ],
        )
        assert result.exit_code == 0, result.output
        assert len(list(out.glob("*.csv"))) == 1

    def test_invalid_format(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(cli, ["--config", config_yaml, "report", "-f", "docx"])
        assert result.exit_code == 1
        assert "Invalid format" in result.output


# ── fetch-weather ──────────────────────────────────────────────────


class TestFetchWeatherCommand:
    def test_requires_api_key(self, runner: CliRunner, config_yaml: str) -> None:
        result = runner.invoke(
            cli,
            ["--config", config_yaml, "fetch-weather", "--start", "2025-01-01", "--end", "2025-01-02"],
        )
        assert result.exit_code == 2
        assert "API key" in result.output

    def test_caches_days(
        self, runner: CliRunner, config_yaml: str, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("METEOSTAT_API_KEY", "secret")
        rows = [{"date": "2025-01-01", "tavg": 2.0}, {"date": "2025-01-02", "tavg": 4.0}]
        with patch("main.MeteostatClient.daily", return_value=rows) as daily:
            result = runner.invoke(
                cli,
                ["--config", config_yaml, "fetch-weather", "--start", "2025-01-01", "--end", "2025-01-02"],
            )
        assert result.exit_code == 0, result.output
        assert "Cached 2 day(s)" in result.output
        assert daily.call_args.args[0] == "10637"

    def test_service_error(
        self, runner: CliRunner, config_yaml: str, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("METEOSTAT_API_KEY", "secret")
        with patch("main.MeteostatClient.daily", side_effect=WeatherServiceError("boom", status=500)):
            result = runner.invoke(cli, ["--config", config_yaml, "fetch-weather", "-s", "10384"])
        assert result.exit_code == 2
