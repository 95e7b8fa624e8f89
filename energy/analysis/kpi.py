"""KPI calculations — period totals, period-over-period change, monthly breakdown."""

from __future__ import annotations

from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from ..formatting import format_co2, format_currency, format_energy
from ..schema import (
    KPICard,
    MonthlyBreakdown,
    PeriodComparison,
    PeriodTotals,
    TrendDirection,
)


def calculate_percentage_change(current: float, previous: float) -> float:
    """Relative change in percent; ``0`` when *previous* is ``0``."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100.0


def period_totals(
    daily: Sequence[Dict[str, Any]],
    weather_normalized_usage: Optional[float] = None,
) -> PeriodTotals:
    """Aggregate daily totals into :class:`PeriodTotals`.

    Args:
        daily: Daily totals with ``kwh``, ``cost`` and ``co2`` keys.
        weather_normalized_usage: Average normalised daily usage, if known.
    """
    if not daily:
        return PeriodTotals(weather_normalized_usage=weather_normalized_usage)
    energy = sum(float(d["kwh"]) for d in daily)
    return PeriodTotals(
        total_energy=energy,
        total_cost=sum(float(d["cost"]) for d in daily),
        total_co2=sum(float(d.get("co2", 0.0)) for d in daily),
        days=len(daily),
        avg_daily_usage=energy / len(daily),
        peak_usage=max(float(d["kwh"]) for d in daily),
        weather_normalized_usage=weather_normalized_usage,
    )


def compare_periods(current: PeriodTotals, previous: PeriodTotals) -> PeriodComparison:
    return PeriodComparison(
        energy_change=calculate_percentage_change(current.total_energy, previous.total_energy),
        cost_change=calculate_percentage_change(current.total_cost, previous.total_cost),
        co2_change=calculate_percentage_change(current.total_co2, previous.total_co2),
    )


def monthly_breakdown(daily: Sequence[Dict[str, Any]]) -> List[MonthlyBreakdown]:
    """Group daily totals by calendar month, oldest first.

    Efficiency compares each month's average daily usage with the leanest
    month of the set: the leanest month scores ``1.0`` and a month using
    twice as much per day scores ``0.5``.
    """
    months: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for d in sorted(daily, key=lambda r: r["date"]):
        day: date = d["date"]
        key = day.strftime("%Y-%m")
        bucket = months.setdefault(key, {
            "label": day.strftime("%b %Y"), "energy": 0.0, "cost": 0.0, "co2": 0.0, "days": 0,
        })
        bucket["energy"] += float(d["kwh"])
        bucket["cost"] += float(d["cost"])
        bucket["co2"] += float(d.get("co2", 0.0))
        bucket["days"] += 1

    per_day = {k: m["energy"] / m["days"] for k, m in months.items()}
    positive = [v for v in per_day.values() if v > 0]
    best = min(positive) if positive else None

    result: List[MonthlyBreakdown] = []
    for key, m in months.items():
        efficiency = None
        if best is not None and per_day[key] > 0:
            efficiency = round(best / per_day[key], 4)
        result.append(MonthlyBreakdown(
            month=key,
            label=m["label"],
            energy=m["energy"],
            cost=m["cost"],
            co2=m["co2"],
            efficiency=efficiency,
        ))
    return result


def _trend(change: float) -> TrendDirection:
    if change > 0:
        return TrendDirection.INCREASING
    if change < 0:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def dashboard_kpis(
    current: PeriodTotals,
    previous: PeriodTotals,
    currency: str = "EUR",
    anomaly_count: int = 0,
) -> List[KPICard]:
    """KPI cards shown on the dashboard."""
    comparison = compare_periods(current, previous)
    avg_change = calculate_percentage_change(current.avg_daily_usage, previous.avg_daily_usage)
    return [
        KPICard(
            label="Total Energy", value=current.total_energy,
            display=format_energy(current.total_energy), unit="kWh",
            change_pct=comparison.energy_change, trend=_trend(comparison.energy_change),
        ),
        KPICard(
            label="Total Cost", value=current.total_cost,
            display=format_currency(current.total_cost, currency), unit=currency,
            change_pct=comparison.cost_change, trend=_trend(comparison.cost_change),
        ),
        KPICard(
            label="CO2 Emissions", value=current.total_co2,
            display=format_co2(current.total_co2), unit="kg",
            change_pct=comparison.co2_change, trend=_trend(comparison.co2_change),
        ),
        KPICard(
            label="Average Daily Usage", value=current.avg_daily_usage,
            display=format_energy(current.avg_daily_usage), unit="kWh",
            change_pct=avg_change, trend=_trend(avg_change),
        ),
        KPICard(
            label="Anomalies", value=float(anomaly_count),
            display=str(anomaly_count), unit="count",
        ),
    ]
