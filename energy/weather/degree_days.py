"""Degree-day calculations and Meteostat row processing."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..schema import WeatherDay, WeatherSummary

DEFAULT_BASE_TEMPERATURE = 18.0


def heating_degree_days(avg_temp: float, base: float = DEFAULT_BASE_TEMPERATURE) -> float:
    """Degrees below *base* for one day (0 when warmer)."""
    return max(0.0, base - avg_temp)


def cooling_degree_days(avg_temp: float, base: float = DEFAULT_BASE_TEMPERATURE) -> float:
    """Degrees above *base* for one day (0 when colder)."""
    return max(0.0, avg_temp - base)


def _num(value: Any) -> float:
    return float(value) if value is not None else 0.0


def process_daily(
    raw_days: Iterable[Dict[str, Any]],
    base: float = DEFAULT_BASE_TEMPERATURE,
) -> List[WeatherDay]:
    """Turn Meteostat daily rows into :class:`WeatherDay` objects.

    Missing observations (``null``) count as 0, as the upstream dashboard
    did.

    Args:
        raw_days: Rows with ``date``, ``tavg``, ``tmin``, ``tmax``, ``prcp``,
            ``wspd`` and ``pres`` keys.
        base: Degree-day base temperature in °C.

    Returns:
        Processed days in input order.
    """
    days: List[WeatherDay] = []
    for raw in raw_days:
        day = raw["date"]
        if isinstance(day, str):
            day = date.fromisoformat(day[:10])
        avg = _num(raw.get("tavg"))
        days.append(WeatherDay(
            date=day,
            avg_temp=avg,
            min_temp=_num(raw.get("tmin")),
            max_temp=_num(raw.get("tmax")),
            precipitation=_num(raw.get("prcp")),
            wind_speed=_num(raw.get("wspd")),
            pressure=_num(raw.get("pres")),
            heating_degree_days=heating_degree_days(avg, base),
            cooling_degree_days=cooling_degree_days(avg, base),
        ))
    return days


def summarize_weather(days: Sequence[WeatherDay]) -> WeatherSummary:
    """Aggregate temperature, precipitation and degree days."""
    if not days:
        return WeatherSummary()
    avg: Optional[float] = sum(d.avg_temp for d in days) / len(days)
    return WeatherSummary(
        total_days=len(days),
        avg_temperature=avg,
        total_precipitation=sum(d.precipitation for d in days),
        total_heating_degree_days=sum(d.heating_degree_days for d in days),
        total_cooling_degree_days=sum(d.cooling_degree_days for d in days),
        min_temperature=min(d.min_temp for d in days),
        max_temperature=max(d.max_temp for d in days),
    )
