"""main.py — CLI entry point for the Building Energy Monitor.

Uses **Click** for command parsing and **Rich** for output.

Usage examples::

    python main.py import-csv readings.csv
    python main.py fetch-weather --start 2025-01-01 --end 2025-03-31
    python main.py analyze --start 2025-01-01 --end 2025-03-31
    python main.py report --start 2025-01-01 --end 2025-03-31 -f csv -f pdf
    python main.py serve --port 8000
    python main.py validate
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

import click

from energy.analysis.kpi import dashboard_kpis, period_totals
from energy.analysis.weather_normalizer import WeatherNormalizer
from energy.config import EnergyConfig
from energy.database.connection import DatabaseConnection
from energy.database.repository import EnergyRepository
from energy.ingest.csv_parser import parse_energy_csv
from energy.report_builder import ReportBuilder, day_bounds, previous_period
from energy.weather.degree_days import process_daily
from energy.weather.meteostat_client import MeteostatClient, WeatherServiceError
from integration.cli import (
    console,
    display_analytics_summary,
    display_error,
    display_import_result,
    display_kpi_table,
    display_report_panel,
    format_file_size,
    parse_date_option,
    validate_format,
)
from integration.config_manager import ConfigManager, SystemConfig
from integration.logger import command_context, get_logger, setup_logging


# ── helpers ────────────────────────────────────────────────────────


@contextmanager
def _open_repository(energy_cfg: EnergyConfig) -> Iterator[EnergyRepository]:
    """Yield a repository on a fresh connection, closing it afterwards."""
    conn = DatabaseConnection(energy_cfg)
    conn.create_tables()
    try:
        yield EnergyRepository(conn)
    finally:
        conn.close()


def _window(
    start: Optional[date], end: Optional[date], days: int,
) -> Tuple[date, date]:
    end = end or datetime.now(timezone.utc).date()
    start = start or end - timedelta(days=days - 1)
    if end < start:
        console.print("[red]--end must not precede --start[/red]")
        raise SystemExit(1)
    return start, end


def _building(repo: EnergyRepository, building_id: Optional[int]) -> Optional[Dict[str, Any]]:
    if building_id is None:
        return None
    building = repo.get_building(building_id)
    if building is None:
        console.print(f"[red]Unknown building:[/red] {building_id}")
        raise SystemExit(1)
    return building


_date_options = [
    click.option("--start", callback=parse_date_option, default=None, help="First day (YYYY-MM-DD)."),
    click.option("--end", callback=parse_date_option, default=None, help="Last day (YYYY-MM-DD)."),
]


def _with_dates(func):  # type: ignore[no-untyped-def]
    for option in reversed(_date_options):
        func = option(func)
    return func


# ── Click group ────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.version_option(version="1.0.0", prog_name="energy-monitor")
@click.option(
    "--config",
    "config_path",
    default="config.yaml",
    envvar="ENERGY_CONFIG",
    help="Path to config.yaml.",
    type=click.Path(),
)
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """⚡ Building Energy Monitor

    Import meter readings, normalise them against the weather, flag
    anomalous days and produce CSV / PDF reports.

    \b
    Quick start:
      python main.py import-csv readings.csv
      python main.py analyze --start 2025-01-01 --end 2025-01-31
      python main.py --help
    """
    ctx.ensure_object(dict)
    try:
        cfg = ConfigManager.load(config_path)
    except Exception as exc:
        console.print(f"[red]Failed to load config:[/red] {exc}")
        raise SystemExit(2) from exc

    ctx.obj["config"] = cfg
    ctx.obj["config_path"] = config_path
    setup_logging(cfg.system.log_level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ── import-csv ─────────────────────────────────────────────────────


@cli.command("import-csv")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--building-id", "-b", type=int, default=None, help="Attach readings to a building.")
@click.pass_context
def import_csv(ctx: click.Context, csv_file: str, building_id: Optional[int]) -> None:
    """Import energy readings from a CSV file.

    Required columns: timestamp, kWh, cost.  Optional: co2, source.

    \b
    Example:
      python main.py import-csv readings.csv -b 1
    """
    config: SystemConfig = ctx.obj["config"]
    energy_cfg = config.to_energy_config()
    log = get_logger("cli.import_csv")

    text = Path(csv_file).read_text(encoding="utf-8-sig")
    result = parse_energy_csv(text, preview_rows=energy_cfg.upload_preview_rows)

    with command_context("import-csv", file=csv_file):
        with _open_repository(energy_cfg) as repo:
            _building(repo, building_id)
            inserted = repo.insert_readings(result.data, building_id=building_id) if result.data else 0
        log.info("csv_imported", inserted=inserted, valid=len(result.data), errors=len(result.errors))

    display_import_result(csv_file, inserted, len(result.data), result.errors)
    if not result.data:
        raise SystemExit(1)


# ── fetch-weather ──────────────────────────────────────────────────


@cli.command("fetch-weather")
@_with_dates
@click.option("--station", "-s", default=None, help="Meteostat station id (default: from config).")
@click.pass_context
def fetch_weather(
    ctx: click.Context,
    start: Optional[date],
    end: Optional[date],
    station: Optional[str],
) -> None:
    """Download daily weather from Meteostat and cache it.

    \b
    Example:
      METEOSTAT_API_KEY=... python main.py fetch-weather --start 2025-01-01 --end 2025-01-31
    """
    config: SystemConfig = ctx.obj["config"]
    energy_cfg = config.to_energy_config()
    start, end = _window(start, end, energy_cfg.analytics_days)
    station = station or energy_cfg.weather_station

    if not energy_cfg.meteostat_api_key:
        console.print("[red]Meteostat API key not configured[/red] (set METEOSTAT_API_KEY)")
        raise SystemExit(2)

    client = MeteostatClient(energy_cfg.meteostat_api_key, timeout=energy_cfg.meteostat_timeout)
    with command_context("fetch-weather", station=station):
        try:
            with console.status(f"[bold green]Fetching weather for station {station} …"):
                raw = client.daily(station, start, end)
        except WeatherServiceError as exc:
            display_error(exc, context="Meteostat")
            raise SystemExit(2) from exc

        days = process_daily(raw, base=energy_cfg.degree_day_base)
        with _open_repository(energy_cfg) as repo:
            stored = repo.upsert_weather(days, station)

    console.print(f"[green]✅ Cached {stored} day(s) of weather for station {station}.[/green]")


# ── analyze ────────────────────────────────────────────────────────


@cli.command()
@_with_dates
@click.option("--building-id", "-b", type=int, default=None, help="Restrict to one building.")
@click.option(
    "--threshold",
    "-t",
    type=click.FloatRange(min=0),
    default=None,
    help="Anomaly threshold in percent (default: from config).",
)
@click.pass_context
def analyze(
    ctx: click.Context,
    start: Optional[date],
    end: Optional[date],
    building_id: Optional[int],
    threshold: Optional[float],
) -> None:
    """Analyse stored readings: KPIs, weather correlation and anomalies.

    \b
    Examples:
      python main.py analyze --start 2025-01-01 --end 2025-01-31
      python main.py analyze -t 15 -b 1
    """
    config: SystemConfig = ctx.obj["config"]
    energy_cfg = config.to_energy_config()
    start, end = _window(start, end, energy_cfg.analytics_days)

    with command_context("analyze"), _open_repository(energy_cfg) as repo:
        building = _building(repo, building_id)
        station = (building or {}).get("weather_station") or energy_cfg.weather_station
        currency = (building or {}).get("currency") or energy_cfg.currency

        with console.status("[bold green]Analysing readings …"):
            daily = repo.daily_totals(*day_bounds(start, end), building_id=building_id)
            prev_start, prev_end = previous_period(start, end)
            previous = repo.daily_totals(*day_bounds(prev_start, prev_end), building_id=building_id)
            weather = repo.get_weather(start, end, station)

    if not daily:
        console.print(f"[yellow]No readings between {start} and {end}.[/yellow]")
        raise SystemExit(1)

    result = WeatherNormalizer().analyze(
        daily,
        weather,
        threshold=energy_cfg.anomaly_threshold if threshold is None else threshold,
    )
    kpis = dashboard_kpis(
        period_totals(daily, result.avg_normalized_usage),
        period_totals(previous),
        currency=currency,
        anomaly_count=result.anomaly_count,
    )
    display_kpi_table(kpis)
    display_analytics_summary(result, start, end, currency=currency)


# ── report ─────────────────────────────────────────────────────────


@cli.command()
@_with_dates
@click.option(
    "--format",
    "-f",
    "formats",
    multiple=True,
    default=None,
    help="Report format(s): csv, pdf.  Repeatable (default: from config).",
)
@click.option("--building-id", "-b", type=int, default=None, help="Restrict to one building.")
@click.option("--output", "-o", default=None, help="Output directory (default: from config).")
@click.pass_context
def report(
    ctx: click.Context,
    start: Optional[date],
    end: Optional[date],
    formats: Tuple[str, ...],
    building_id: Optional[int],
    output: Optional[str],
) -> None:
    """Generate an energy report for a period.

    \b
    Examples:
      python main.py report --start 2025-01-01 --end 2025-03-31 -f pdf
      python main.py report -f csv -f pdf -o out/
    """
    config: SystemConfig = ctx.obj["config"]
    energy_cfg = config.to_energy_config()
    formats = tuple(formats) or tuple(config.reporting.default_formats)

    for fmt in formats:
        if not validate_format(fmt):
            console.print(f"[red]Invalid format:[/red] '{fmt}'.  Valid: csv, pdf")
            raise SystemExit(1)

    start, end = _window(start, end, energy_cfg.analytics_days)

    with command_context("report"), _open_repository(energy_cfg) as repo:
        building = _building(repo, building_id)
        builder = ReportBuilder(repo, energy_cfg)
        with console.status("[bold green]Generating report …"):
            energy_report = builder.build_report(start, end, building)
            files: Dict[str, str] = {
                fmt.lower(): builder.save(energy_report, fmt=fmt, output_dir=output)
                for fmt in formats
            }

    display_report_panel(energy_report, files)
    for path in files.values():
        console.print(f"  {Path(path).name}: {format_file_size(Path(path).stat().st_size)}")


# ── serve ──────────────────────────────────────────────────────────


@cli.command()
@click.option("--host", "-h", default=None, help="Bind host (default: from config).")
@click.option("--port", "-p", default=None, type=int, help="Bind port (default: from config).")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the REST API server.

    \b
    Example:
      python main.py serve --port 8000
    """
    import uvicorn

    from energy.api.dependencies import init_dependencies
    from energy.api.server import app

    config: SystemConfig = ctx.obj["config"]
    bind_host = host or config.api.host
    bind_port = port or config.api.port

    console.print(
        f"[bold green]Starting API server on {bind_host}:{bind_port} …[/bold green]",
    )
    console.print("Swagger UI → http://localhost:{0}/docs".format(bind_port))

    init_dependencies(config.to_energy_config())
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")


# ── validate ───────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the configuration file.

    \b
    Example:
      python main.py --config config.yaml validate
    """
    cfg: SystemConfig = ctx.obj["config"]
    issues = ConfigManager.validate(cfg)
    if issues:
        console.print("[yellow]⚠ Validation issues:[/yellow]")
        for issue in issues:
            console.print(f"  • {issue}")
        raise SystemExit(1)

    console.print("[green]✅ Configuration is valid.[/green]")
    console.print(f"  Config file  : {ctx.obj['config_path']}")
    console.print(f"  Log level    : {cfg.system.log_level}")
    console.print(f"  Database     : {cfg.database.url}")
    console.print(f"  Tariff       : {cfg.tariffs.energy_tariff} {cfg.tariffs.currency}/kWh")
    console.print(f"  CO2 factor   : {cfg.tariffs.co2_factor} kg/kWh")
    console.print(f"  Weather      : station {cfg.weather.station}"
                  f" ({'API key set' if cfg.weather.api_key else 'no API key'})")


# ── entrypoint ─────────────────────────────────────────────────────


if __name__ == "__main__":
    cli()
