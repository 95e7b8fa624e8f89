"""CLI helpers — argument validation, output formatting, Rich widgets."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from energy.analysis.correlation_calculator import CorrelationCalculator
from energy.formatting import format_change, format_co2, format_currency, format_energy
from energy.schema import AnalyticsResult, EnergyReport, KPICard, ReportFormat, TrendDirection

console = Console(stderr=True)

_TREND_STYLE = {
    TrendDirection.INCREASING: "red",
    TrendDirection.DECREASING: "green",
    TrendDirection.STABLE: "white",
}


# ── validation helpers ─────────────────────────────────────────────


def validate_format(fmt: str) -> bool:
    """Return ``True`` if *fmt* is a supported report format."""
    return fmt.lower() in {f.value for f in ReportFormat}


def parse_date_option(
    ctx: click.Context, param: click.Parameter, value: Optional[str],
) -> Optional[date]:
    """Click callback turning ``YYYY-MM-DD`` into a :class:`date`."""
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise click.BadParameter(f"expected YYYY-MM-DD, got '{value}'") from exc


# ── formatting helpers ─────────────────────────────────────────────


def format_file_size(size_bytes: int) -> str:
    """Format *size_bytes* as ``1.2 MB`` / ``845 KB`` etc."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def format_correlation(r: Optional[float]) -> str:
    """Format a Pearson coefficient with its strength label."""
    if r is None:
        return "n/a"
    return f"{r:+.2f} ({CorrelationCalculator.describe(r)})"


# ── Rich widgets ───────────────────────────────────────────────────


def display_import_result(
    path: str, inserted: int, total_valid: int, errors: Sequence[str],
) -> None:
    """Show how many CSV rows were stored and list row errors."""
    skipped = total_valid - inserted
    style = "green" if not errors else "yellow"
    body = (
        f"File      : [cyan]{path}[/cyan]\n"
        f"Valid rows: {total_valid}\n"
        f"Inserted  : [green]{inserted}[/green]\n"
        f"Duplicates: {skipped}\n"
        f"Errors    : {len(errors)}"
    )
    console.print(Panel(body, title="CSV import", border_style=style, padding=(1, 2)))
    for err in errors[:20]:
        console.print(f"  [red]•[/red] {err}")
    if len(errors) > 20:
        console.print(f"  … and {len(errors) - 20} more")


def display_kpi_table(kpis: List[KPICard]) -> None:
    table = Table(title="Key figures", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_column("Change", justify="right")
    for card in kpis:
        style = _TREND_STYLE.get(card.trend, "white")
        table.add_row(card.label, card.display, f"[{style}]{format_change(card.change_pct)}[/{style}]")
    console.print(table)


def display_analytics_summary(
    result: AnalyticsResult,
    start: date,
    end: date,
    currency: str = "EUR",
) -> None:
    """Print the analysis of a period: baseline, correlation, anomalous days."""
    console.print(f"\n[bold]📊 Energy analysis {start} → {end}[/bold]\n")
    console.print(f"  Days analysed          : {len(result.rows)}")
    baseline = "n/a" if result.baseline_kwh is None else format_energy(result.baseline_kwh)
    console.print(f"  Baseline (mean daily)  : {baseline}")
    console.print(
        f"  Anomalies              : {result.anomaly_count} "
        f"(threshold {result.anomaly_threshold:g}%)",
    )
    console.print(
        f"  Temperature correlation: {format_correlation(result.temperature_correlation)}",
    )
    if result.degree_day_slope is not None:
        console.print(f"  kWh per degree day     : {result.degree_day_slope:.2f}")
    if result.base_load_kwh is not None:
        console.print(f"  Base load              : {format_energy(result.base_load_kwh)}")
    console.print("")

    anomalies = [r for r in result.rows if r.is_anomaly]
    if not anomalies:
        return
    table = Table(title="Anomalous days", show_header=True, header_style="bold red")
    table.add_column("Date", style="cyan")
    table.add_column("Energy", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Temp", justify="right")
    table.add_column("Score", justify="right")
    for row in anomalies:
        table.add_row(
            row.date.isoformat(),
            format_energy(row.kwh),
            format_currency(row.cost, currency),
            "—" if row.avg_temp is None else f"{row.avg_temp:.1f}°C",
            f"{row.anomaly_score:.2f}",
        )
    console.print(table)


def display_report_panel(report: EnergyReport, files: Dict[str, str]) -> None:
    """Display a success panel summarising a generated report."""
    meta = report.metadata
    cur = report.current
    files_display = "\n".join(f"  {fmt.upper()}: {path}" for fmt, path in files.items()) or "  none"
    body = (
        f"[green]✅ Report generated[/green]\n\n"
        f"Report ID : [cyan]{meta.report_id}[/cyan]\n"
        f"Period    : {meta.period_start} → {meta.period_end}\n"
        f"Energy    : {format_energy(cur.total_energy)} "
        f"({format_change(report.comparison.energy_change)})\n"
        f"Cost      : {format_currency(cur.total_cost, meta.currency)} "
        f"({format_change(report.comparison.cost_change)})\n"
        f"CO2       : {format_co2(cur.total_co2)}\n"
        f"Anomalies : {report.anomaly_count}\n"
        f"Files     :\n{files_display}"
    )
    console.print(Panel(body, title="Report", border_style="green", padding=(1, 2)))


def display_error(error: Exception, context: str = "") -> None:
    """Display a formatted error panel."""
    msg = f"[red]✗ Error{f' ({context})' if context else ''}[/red]\n\n{error}"
    console.print(Panel(msg, title="Error", border_style="red", padding=(1, 2)))
