"""Tests for energy.analysis.trend_analyzer."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from energy.analysis.trend_analyzer import TrendAnalyzer
from energy.schema import TrendDirection


@pytest.fixture
def analyzer() -> TrendAnalyzer:
    return TrendAnalyzer()


class TestAnalyzeMetric:
    def test_increasing(self, analyzer: TrendAnalyzer) -> None:
        result = analyzer.analyze_metric([1.0, 2.0, 3.0, 4.0], metric_name="kwh")
        assert result.direction == TrendDirection.INCREASING
        assert result.slope == pytest.approx(1.0)
        assert result.r_squared == pytest.approx(1.0)
        assert result.data_points == 4
        assert result.metric_name == "kwh"

    def test_decreasing(self, analyzer: TrendAnalyzer) -> None:
        result = analyzer.analyze_metric([40.0, 30.0, 20.0, 10.0])
        assert result.direction == TrendDirection.DECREASING
        assert result.slope == pytest.approx(-10.0)

    def test_flat_is_stable(self, analyzer: TrendAnalyzer) -> None:
        result = analyzer.analyze_metric([5.0, 5.0, 5.0])
        assert result.direction == TrendDirection.STABLE

    def test_slope_below_threshold_is_stable(self) -> None:
        analyzer = TrendAnalyzer(stability_threshold=1.0)
        assert analyzer.analyze_metric([1.0, 1.5, 2.0]).direction == TrendDirection.STABLE

    @pytest.mark.parametrize("values", [[], [42.0]])
    def test_too_few_points(self, analyzer: TrendAnalyzer, values: list) -> None:
        result = analyzer.analyze_metric(values)
        assert result.direction == TrendDirection.STABLE
        assert result.data_points == len(values)

    def test_dates_carried_through(self, analyzer: TrendAnalyzer) -> None:
        dates = [date(2025, 1, 1), date(2025, 1, 2)]
        result = analyzer.analyze_metric([1.0, 2.0], dates)
        assert result.dates == dates
        assert result.values == [1.0, 2.0]


class TestAnalyzeDaily:
    def test_all_metrics(self, analyzer: TrendAnalyzer) -> None:
        start = date(2025, 1, 1)
        daily = [
            {"date": start + timedelta(days=i), "kwh": 100 + 10 * i, "cost": 12.0, "co2": 50 - i}
            for i in range(5)
        ]
        trends = analyzer.analyze_daily(daily)
        assert set(trends) == {"kwh", "cost", "co2"}
        assert trends["kwh"].direction == TrendDirection.INCREASING
        assert trends["cost"].direction == TrendDirection.STABLE
        assert trends["co2"].direction == TrendDirection.DECREASING

    def test_empty(self, analyzer: TrendAnalyzer) -> None:
        trends = analyzer.analyze_daily([])
        assert trends["kwh"].data_points == 0
