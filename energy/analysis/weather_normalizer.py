"""Weather normalisation — join daily energy with weather and derive analytics."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .anomaly_detector import AnomalyDetector
from .correlation_calculator import CorrelationCalculator
from .errors import AnalysisError, DegenerateInputError
from .linear_regressor import LinearRegressor, RegressionLine
from ..schema import AnalyticsResult, DailyAnalytics, WeatherDay
from ..telemetry import get_logger

_logger = get_logger(__name__)


class WeatherNormalizer:
    """Build the daily analytics table.

    Daily consumption is regressed on total degree days (heating plus
    cooling).  The intercept is the weather-independent base load and a
    day's normalised usage is its consumption scaled by
    ``base_load / expected``.  Days without weather data, or for which the
    fit is degenerate, have no normalised value.

    Args:
        detector: Anomaly detector (default threshold 20 %).
        regressor: Least-squares regressor.
        correlation: Pearson correlation calculator.
    """

    def __init__(
        self,
        detector: Optional[AnomalyDetector] = None,
        regressor: Optional[LinearRegressor] = None,
        correlation: Optional[CorrelationCalculator] = None,
    ) -> None:
        self._detector = detector or AnomalyDetector()
        self._regressor = regressor or LinearRegressor()
        self._correlation = correlation or CorrelationCalculator()

    def fit_degree_days(
        self, daily: Sequence[Dict[str, Any]], weather: Dict[Any, WeatherDay],
    ) -> Optional[RegressionLine]:
        """Fit kWh against degree days; ``None`` when the fit is degenerate."""
        points = [
            (
                weather[d["date"]].heating_degree_days
                + weather[d["date"]].cooling_degree_days,
                float(d["kwh"]),
            )
            for d in daily
            if d["date"] in weather
        ]
        try:
            return self._regressor.fit(points)
        except DegenerateInputError as exc:
            _logger.info("Degree-day regression skipped: %s", exc)
            return None

    @staticmethod
    def normalize(kwh: float, degree_days: float, line: Optional[RegressionLine]) -> Optional[float]:
        """Weather-normalised consumption for one day."""
        if line is None:
            return None
        expected = line.predict(degree_days)
        if expected <= 0:
            return None
        return kwh / expected * line.intercept

    def analyze(
        self,
        daily: Sequence[Dict[str, Any]],
        weather_days: Sequence[WeatherDay],
        threshold: Optional[float] = None,
    ) -> AnalyticsResult:
        """Produce one :class:`DailyAnalytics` row per day of *daily*.

        Args:
            daily: Chronological daily totals (``date``, ``kwh``, ``cost``,
                ``co2``).
            weather_days: Weather observations; matched by date.
            threshold: Anomaly threshold override in percent.

        Returns:
            An :class:`AnalyticsResult`.
        """
        limit = self._detector.threshold if threshold is None else threshold
        weather = {w.date: w for w in weather_days}
        usage = [float(d["kwh"]) for d in daily]
        flags = self._detector.detect(usage, threshold=limit)
        scores = self._detector.scores(usage)
        line = self.fit_degree_days(daily, weather)

        rows: List[DailyAnalytics] = []
        temps: List[float] = []
        matched_usage: List[float] = []
        for d, flag, score in zip(daily, flags, scores):
            w = weather.get(d["date"])
            normalized = None
            if w is not None:
                degree_days = w.heating_degree_days + w.cooling_degree_days
                normalized = self.normalize(float(d["kwh"]), degree_days, line)
                temps.append(w.avg_temp)
                matched_usage.append(float(d["kwh"]))
            rows.append(DailyAnalytics(
                date=d["date"],
                kwh=float(d["kwh"]),
                cost=float(d["cost"]),
                co2=float(d.get("co2", 0.0)),
                avg_temp=w.avg_temp if w else None,
                heating_degree_days=w.heating_degree_days if w else None,
                cooling_degree_days=w.cooling_degree_days if w else None,
                normalized_usage=normalized,
                is_anomaly=flag,
                anomaly_score=score,
            ))

        try:
            r = self._correlation.pearson(temps, matched_usage)
        except AnalysisError:
            r = None

        normalized_values = [row.normalized_usage for row in rows if row.normalized_usage is not None]
        return AnalyticsResult(
            rows=rows,
            baseline_kwh=self._detector.baseline(usage),
            anomaly_count=sum(flags),
            anomaly_threshold=limit,
            temperature_correlation=r,
            correlation_strength=self._correlation.describe(r),
            degree_day_slope=line.slope if line else None,
            base_load_kwh=line.intercept if line else None,
            avg_normalized_usage=(
                sum(normalized_values) / len(normalized_values) if normalized_values else None
            ),
        )
