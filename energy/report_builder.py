"""Report builder — assembles period energy reports and renders them to disk.

Combines the repository's daily totals, weather-normalised analytics and the
period-over-period KPIs into an :class:`EnergyReport`, then renders it as
CSV or PDF and keeps track of the generated files for later download.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .analysis.kpi import compare_periods, monthly_breakdown, period_totals
from .analysis.weather_normalizer import WeatherNormalizer
from .config import EnergyConfig
from .database.repository import EnergyRepository
from .schema import (
    AnalyticsResult,
    EnergyReport,
    MonthlyBreakdown,
    ReportFormat,
    ReportMetadata,
    WeatherDay,
)
from .telemetry import (
    anomalies_detected_total,
    get_logger,
    report_generation_seconds,
    reports_generated_total,
)

_logger = get_logger(__name__)

_EXTENSIONS = {ReportFormat.CSV: ".csv", ReportFormat.PDF: ".pdf"}


def previous_period(start: date, end: date) -> Tuple[date, date]:
    """The period of equal length immediately before ``[start, end]``."""
    length = end - start
    prev_end = start - timedelta(days=1)
    return prev_end - length, prev_end


def day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """Datetime range covering whole days *start* through *end*."""
    return datetime.combine(start, time.min), datetime.combine(end, time.max)


class ReportBuilder:
    """Assemble and render :class:`EnergyReport` objects.

    Args:
        repository: Data source for :meth:`build_report`.  Optional when only
            :meth:`assemble` is used.
        config: Energy configuration.
    """

    def __init__(
        self,
        repository: Optional[EnergyRepository] = None,
        config: Optional[EnergyConfig] = None,
    ) -> None:
        self._repo = repository
        self._cfg = config or EnergyConfig()
        self._normalizer = WeatherNormalizer()
        self._generated_reports: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_report(
        self,
        start: date,
        end: date,
        building: Optional[Dict[str, Any]] = None,
    ) -> EnergyReport:
        """Query the repository and assemble the report for ``[start, end]``.

        Args:
            start: First day of the period.
            end: Last day of the period (inclusive).
            building: Building dictionary; readings, station and currency
                are taken from it when given.

        Returns:
            A fully-populated :class:`EnergyReport`.

        Raises:
            RuntimeError: If the builder has no repository.
            ValueError: If *end* precedes *start*.
        """
        if self._repo is None:
            raise RuntimeError("ReportBuilder needs a repository to build reports")
        if end < start:
            raise ValueError("end must not precede start")

        building_id = building["id"] if building else None
        station = (building or {}).get("weather_station") or self._cfg.weather_station
        prev_start, prev_end = previous_period(start, end)

        current = self._repo.daily_totals(*day_bounds(start, end), building_id=building_id)
        previous = self._repo.daily_totals(*day_bounds(prev_start, prev_end), building_id=building_id)
        weather = self._repo.get_weather(start, end, station)

        return self.assemble(
            current,
            previous,
            weather,
            start=start,
            end=end,
            building_name=(building or {}).get("name", ""),
            currency=(building or {}).get("currency") or self._cfg.currency,
        )

    def assemble(
        self,
        current: Sequence[Dict[str, Any]],
        previous: Sequence[Dict[str, Any]],
        weather: Sequence[WeatherDay],
        *,
        start: date,
        end: date,
        building_name: str = "",
        currency: str = "EUR",
    ) -> EnergyReport:
        """Build a report from already-loaded daily totals and weather."""
        analytics = self._normalizer.analyze(
            current, weather, threshold=self._cfg.anomaly_threshold,
        )
        current_totals = period_totals(current, analytics.avg_normalized_usage)
        previous_totals = period_totals(previous)
        months = monthly_breakdown(current)

        report = EnergyReport(
            metadata=ReportMetadata(
                building_name=building_name,
                period_start=start,
                period_end=end,
                currency=currency,
            ),
            current=current_totals,
            previous=previous_totals,
            comparison=compare_periods(current_totals, previous_totals),
            monthly=months,
            anomaly_count=analytics.anomaly_count,
            temperature_correlation=analytics.temperature_correlation,
            visualizations=self._build_visualizations(analytics, months),
        )

        rid = report.metadata.report_id
        self._generated_reports[rid] = {
            "report_id": rid,
            "period_start": start.isoformat(),
            "period_end": end.isoformat(),
            "generated_at": report.metadata.generated_at.isoformat(),
            "report": report,
        }
        if analytics.anomaly_count:
            anomalies_detected_total.inc(analytics.anomaly_count)
        _logger.info("Built report %s for %s..%s", rid, start, end)
        return report

    def render(self, report: EnergyReport, fmt: str = "csv") -> bytes:
        """Render *report* in the given format.

        Raises:
            ValueError: Unknown format.
        """
        report_format = ReportFormat(fmt.lower())
        with report_generation_seconds.labels(format=report_format.value).time():
            if report_format is ReportFormat.PDF:
                from .generators.pdf_generator import PDFGenerator
                content = PDFGenerator(config=self._cfg).generate(report)
            else:
                from .generators.csv_generator import CSVGenerator
                content = CSVGenerator().generate(report).encode("utf-8")
        reports_generated_total.labels(format=report_format.value).inc()
        return content

    def save(
        self,
        report: EnergyReport,
        fmt: str = "csv",
        output_dir: Optional[str] = None,
    ) -> str:
        """Render and save a report to disk.

        Returns:
            Path of the written file.
        """
        report_format = ReportFormat(fmt.lower())
        out_dir = Path(output_dir or self._cfg.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        meta = report.metadata
        filename = (
            f"energy-report-{meta.period_start.isoformat()}-to-{meta.period_end.isoformat()}"
            f"-{meta.report_id[:8]}{_EXTENSIONS[report_format]}"
        )
        path = out_dir / filename
        path.write_bytes(self.render(report, report_format.value))
        _logger.info("Saved report to %s", path)

        entry = self._generated_reports.setdefault(meta.report_id, {
            "report_id": meta.report_id,
            "period_start": meta.period_start.isoformat(),
            "period_end": meta.period_end.isoformat(),
            "generated_at": meta.generated_at.isoformat(),
            "report": report,
        })
        entry.setdefault("files", {})[report_format.value] = str(path)
        return str(path)

    def get_report(self, report_id: str) -> Optional[EnergyReport]:
        entry = self._generated_reports.get(report_id)
        return None if entry is None else entry["report"]

    def get_report_metadata(self, report_id: str) -> Optional[Dict[str, Any]]:
        """Metadata for a previously generated report, or ``None``."""
        entry = self._generated_reports.get(report_id)
        if entry is None:
            return None
        files = entry.get("files", {})
        return {
            "report_id": entry["report_id"],
            "period_start": entry["period_start"],
            "period_end": entry["period_end"],
            "generated_at": entry["generated_at"],
            "formats": sorted(files),
            "files": files,
        }

    def get_report_file(self, report_id: str, fmt: str) -> Optional[str]:
        """File path of a saved report, or ``None``."""
        entry = self._generated_reports.get(report_id)
        if entry is None:
            return None
        return entry.get("files", {}).get(fmt.lower())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_visualizations(
        self, analytics: AnalyticsResult, months: List[MonthlyBreakdown],
    ) -> Dict[str, str]:
        if not self._cfg.include_charts or not analytics.rows:
            return {}
        from .visualizations.usage_charts import UsageCharts

        charts = UsageCharts(self._cfg)
        viz = {"daily_usage": charts.daily_usage_base64(analytics.rows)}
        if len(months) > 1:
            viz["monthly"] = charts.monthly_bars_base64(months)
        return viz
