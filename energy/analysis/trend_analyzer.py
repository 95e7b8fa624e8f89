"""Trend analysis — direction and strength of energy metrics over time."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from .errors import DegenerateInputError
from .linear_regressor import LinearRegressor
from ..schema import TrendDirection, TrendResult
from ..telemetry import get_logger

_logger = get_logger(__name__)

DAILY_METRICS = ("kwh", "cost", "co2")


class TrendAnalyzer:
    """Detect trends by fitting a line through the metric against its index.

    Args:
        stability_threshold: Absolute slope below which the trend
            is labelled *stable*.  Defaults to ``0.01``.
    """

    def __init__(self, stability_threshold: float = 0.01) -> None:
        self._stability = stability_threshold
        self._regressor = LinearRegressor()

    def analyze_metric(
        self,
        values: Sequence[float],
        dates: Optional[Sequence[date]] = None,
        metric_name: str = "metric",
    ) -> TrendResult:
        """Analyse a single metric's trend.

        Args:
            values: Ordered metric values.
            dates: Optional corresponding dates.
            metric_name: Human-readable metric label.

        Returns:
            A frozen :class:`TrendResult`; fewer than two values are *stable*.
        """
        values = list(values)
        dates = list(dates or [])
        points = [(float(i), v) for i, v in enumerate(values)]
        try:
            line = self._regressor.fit(points)
        except DegenerateInputError:
            return TrendResult(
                metric_name=metric_name,
                data_points=len(values),
                values=values,
                dates=dates,
            )

        r_sq = self._regressor.r_squared(points, line)
        if abs(line.slope) < self._stability:
            direction = TrendDirection.STABLE
        elif line.slope > 0:
            direction = TrendDirection.INCREASING
        else:
            direction = TrendDirection.DECREASING

        return TrendResult(
            metric_name=metric_name,
            direction=direction,
            slope=round(line.slope, 6),
            r_squared=round(r_sq, 4),
            data_points=len(values),
            values=values,
            dates=dates,
        )

    def analyze_daily(
        self,
        daily: List[Dict[str, Any]],
    ) -> Dict[str, TrendResult]:
        """Analyse kWh, cost and CO2 trends over chronological daily totals.

        Args:
            daily: Output of ``EnergyRepository.daily_totals``.

        Returns:
            Dictionary mapping metric name to :class:`TrendResult`.
        """
        dates = [d["date"] for d in daily]
        results: Dict[str, TrendResult] = {}
        for m in DAILY_METRICS:
            vals = [float(d.get(m, 0.0)) for d in daily]
            results[m] = self.analyze_metric(vals, dates, metric_name=m)
        _logger.info(
            "Trend analysis over %d days: kwh %s", len(daily), results["kwh"].direction.value,
        )
        return results
