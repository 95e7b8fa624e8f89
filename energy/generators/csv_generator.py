"""Generate CSV exports for energy reports and the analytics table."""

from __future__ import annotations

import csv
import io
from typing import Optional, Sequence

from ..formatting import format_change
from ..schema import CURRENCIES, DailyAnalytics, EnergyReport
from ..telemetry import get_logger

_logger = get_logger(__name__)

REPORT_HEADER = ["Metric", "Value", "Unit", "Change from Previous Period"]
MONTHLY_HEADER = ["Month", "Energy (kWh)", "Cost ({currency})", "CO2 (kg)", "Efficiency"]
ANALYTICS_HEADER = [
    "Date",
    "Energy (kWh)",
    "Cost ({symbol})",
    "Temperature (°C)",
    "Normalized Usage",
    "Anomaly",
    "Anomaly Score",
]


def _num(value: Optional[float], digits: int = 2) -> str:
    return "" if value is None else f"{value:.{digits}f}"


class CSVGenerator:
    """Render reports and analytics rows as CSV text."""

    def generate(self, report: EnergyReport) -> str:
        """Report CSV: headline metrics, a blank line, then the monthly table.

        Args:
            report: The energy report.

        Returns:
            CSV content with ``\\n`` line endings.
        """
        currency = report.metadata.currency
        cur = report.current
        cmp_ = report.comparison

        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(REPORT_HEADER)
        writer.writerows([
            ["Total Energy", _num(cur.total_energy), "kWh", format_change(cmp_.energy_change)],
            ["Total Cost", _num(cur.total_cost), currency, format_change(cmp_.cost_change)],
            ["Total CO2", _num(cur.total_co2), "kg", format_change(cmp_.co2_change)],
            ["Average Daily Usage", _num(cur.avg_daily_usage), "kWh", ""],
            ["Peak Usage", _num(cur.peak_usage), "kWh", ""],
            ["Anomalies Detected", str(report.anomaly_count), "count", ""],
            ["Weather Normalized Usage", _num(cur.weather_normalized_usage), "kWh", ""],
            ["Temperature Correlation", _num(report.temperature_correlation, 3), "r", ""],
        ])
        writer.writerow([])
        writer.writerow(["Monthly Breakdown"])
        writer.writerow([h.format(currency=currency) for h in MONTHLY_HEADER])
        for m in report.monthly:
            writer.writerow([
                m.label, _num(m.energy), _num(m.cost), _num(m.co2), _num(m.efficiency, 4),
            ])
        return buf.getvalue()

    def generate_analytics(
        self, rows: Sequence[DailyAnalytics], currency: str = "EUR",
    ) -> str:
        """Analytics table CSV, one line per day."""
        symbol = CURRENCIES.get(currency.upper(), currency.upper())
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow([h.format(symbol=symbol) for h in ANALYTICS_HEADER])
        for r in rows:
            writer.writerow([
                r.date.isoformat(),
                _num(r.kwh),
                _num(r.cost),
                _num(r.avg_temp, 1),
                _num(r.normalized_usage),
                "Yes" if r.is_anomaly else "No",
                _num(r.anomaly_score, 3),
            ])
        _logger.info("Rendered analytics CSV with %d rows", len(rows))
        return buf.getvalue()

