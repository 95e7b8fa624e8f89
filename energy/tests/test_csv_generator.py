"""Tests for energy.generators.csv_generator."""

from __future__ import annotations

import csv
import io
from datetime import date

import pytest

from energy.generators.csv_generator import CSVGenerator
from energy.schema import (
    DailyAnalytics,
    EnergyReport,
    MonthlyBreakdown,
    PeriodComparison,
    PeriodTotals,
    ReportMetadata,
)


@pytest.fixture
def report() -> EnergyReport:
    return EnergyReport(
        metadata=ReportMetadata(period_start=date(2025, 1, 1), period_end=date(2025, 2, 28)),
        current=PeriodTotals(
            total_energy=1234.5, total_cost=148.14, total_co2=493.8,
            days=59, avg_daily_usage=20.92, peak_usage=45.0,
        ),
        comparison=PeriodComparison(energy_change=4.24, cost_change=-2.0, co2_change=0.0),
        monthly=[
            MonthlyBreakdown(month="2025-01", label="Jan 2025", energy=700, cost=84, co2=280, efficiency=0.8857),
            MonthlyBreakdown(month="2025-02", label="Feb 2025", energy=534.5, cost=64.14, co2=213.8, efficiency=1.0),
        ],
        anomaly_count=3,
        temperature_correlation=-0.8123,
    )


class TestReportCSV:
    def test_header_and_metrics(self, report: EnergyReport) -> None:
        rows = list(csv.reader(io.StringIO(CSVGenerator().generate(report))))
        assert rows[0] == ["Metric", "Value", "Unit", "Change from Previous Period"]
        assert rows[1] == ["Total Energy", "1234.50", "kWh", "+4.2%"]
        assert rows[2] == ["Total Cost", "148.14", "EUR", "-2.0%"]
        assert rows[3] == ["Total CO2", "493.80", "kg", "0.0%"]
        assert rows[6] == ["Anomalies Detected", "3", "count", ""]
        assert rows[7] == ["Weather Normalized Usage", "", "kWh", ""]
        assert rows[8] == ["Temperature Correlation", "-0.812", "r", ""]

    def test_monthly_section(self, report: EnergyReport) -> None:
        rows = list(csv.reader(io.StringIO(CSVGenerator().generate(report))))
        assert rows[9] == []
        assert rows[10] == ["Monthly Breakdown"]
        assert rows[11] == ["Month", "Energy (kWh)", "Cost (EUR)", "CO2 (kg)", "Efficiency"]
        assert rows[12] == ["Jan 2025", "700.00", "84.00", "280.00", "0.8857"]
        assert len(rows) == 14


class TestAnalyticsCSV:
    def test_rows(self) -> None:
        rows = [
            DailyAnalytics(date=date(2025, 1, 1), kwh=100, cost=12, avg_temp=3.25,
                           normalized_usage=95.5, is_anomaly=False, anomaly_score=0.05),
            DailyAnalytics(date=date(2025, 1, 2), kwh=180, cost=21.6, is_anomaly=True, anomaly_score=0.6),
        ]
        parsed = list(csv.reader(io.StringIO(CSVGenerator().generate_analytics(rows, "USD"))))
        assert parsed[0] == [
            "Date", "Energy (kWh)", "Cost ($)", "Temperature (°C)",
            "Normalized Usage", "Anomaly", "Anomaly Score",
        ]
        assert parsed[1] == ["2025-01-01", "100.00", "12.00", "3.2", "95.50", "No", "0.050"]
        assert parsed[2][3] == ""
        assert parsed[2][5] == "Yes"

    def test_empty(self) -> None:
        text = CSVGenerator().generate_analytics([])
        assert text.splitlines()[0].startswith("Date,Energy (kWh),Cost (€)")
        assert len(text.splitlines()) == 1
