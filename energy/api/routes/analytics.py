"""Analytics endpoints — daily table, trends, dashboard KPIs, CSV and chart export."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response

from ..dependencies import get_config, get_repository
from ..models import AnalyticsResponse, DashboardResponse, TrendsResponse
from ...analysis.errors import AnalysisError
from ...analysis.kpi import dashboard_kpis, period_totals
from ...analysis.trend_analyzer import TrendAnalyzer
from ...analysis.weather_normalizer import WeatherNormalizer
from ...config import EnergyConfig
from ...database.repository import EnergyRepository
from ...generators.csv_generator import CSVGenerator
from ...report_builder import day_bounds, previous_period
from ...schema import AnalyticsResult
from ...visualizations.usage_charts import METRIC_LABELS, UsageCharts

router = APIRouter(tags=["analytics"])


def resolve_window(
    start: Optional[date], end: Optional[date], cfg: EnergyConfig,
) -> Tuple[date, date]:
    """Default to the configured lookback window ending today (UTC)."""
    end = end or datetime.now(timezone.utc).date()
    start = start or end - timedelta(days=cfg.analytics_days - 1)
    if end < start:
        raise HTTPException(status_code=400, detail="end must not precede start")
    return start, end


def resolve_building(
    repo: EnergyRepository, building_id: Optional[int],
) -> Optional[Dict[str, Any]]:
    if building_id is None:
        return None
    building = repo.get_building(building_id)
    if building is None:
        raise HTTPException(status_code=404, detail="Building not found")
    return building


def load_analytics(
    repo: EnergyRepository,
    cfg: EnergyConfig,
    start: date,
    end: date,
    building: Optional[Dict[str, Any]] = None,
    threshold: Optional[float] = None,
) -> AnalyticsResult:
    """Daily totals joined with cached weather for the building's station."""
    station = (building or {}).get("weather_station") or cfg.weather_station
    daily = repo.daily_totals(
        *day_bounds(start, end), building_id=building["id"] if building else None,
    )
    weather = repo.get_weather(start, end, station)
    try:
        return WeatherNormalizer().analyze(
            daily, weather, threshold=cfg.anomaly_threshold if threshold is None else threshold,
        )
    except AnalysisError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get(
    "/daily",
    response_model=AnalyticsResponse,
    summary="Daily usage with weather normalisation and anomaly flags",
)
def daily_analytics(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    building_id: Optional[int] = Query(None),
    threshold: Optional[float] = Query(None, ge=0, description="Anomaly threshold in percent"),
    repo: EnergyRepository = Depends(get_repository),
) -> AnalyticsResponse:
    cfg = get_config()
    start, end = resolve_window(start, end, cfg)
    building = resolve_building(repo, building_id)
    result = load_analytics(repo, cfg, start, end, building, threshold)
    return AnalyticsResponse(
        start=start,
        end=end,
        rows=result.rows,
        baseline_kwh=result.baseline_kwh,
        anomaly_count=result.anomaly_count,
        anomaly_threshold=result.anomaly_threshold,
        temperature_correlation=result.temperature_correlation,
        correlation_strength=result.correlation_strength,
        degree_day_slope=result.degree_day_slope,
        base_load_kwh=result.base_load_kwh,
    )


@router.get(
    "/trends",
    response_model=TrendsResponse,
    summary="Usage, cost and CO2 trends",
)
def trends(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    building_id: Optional[int] = Query(None),
    repo: EnergyRepository = Depends(get_repository),
) -> TrendsResponse:
    cfg = get_config()
    start, end = resolve_window(start, end, cfg)
    resolve_building(repo, building_id)
    daily = repo.daily_totals(*day_bounds(start, end), building_id=building_id)
    return TrendsResponse(trends=TrendAnalyzer().analyze_daily(daily))


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard KPIs against the previous period",
)
def dashboard(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    building_id: Optional[int] = Query(None),
    repo: EnergyRepository = Depends(get_repository),
) -> DashboardResponse:
    cfg = get_config()
    start, end = resolve_window(start, end, cfg)
    building = resolve_building(repo, building_id)
    result = load_analytics(repo, cfg, start, end, building)

    prev_start, prev_end = previous_period(start, end)
    previous = repo.daily_totals(*day_bounds(prev_start, prev_end), building_id=building_id)
    current_totals = period_totals(
        [{"kwh": r.kwh, "cost": r.cost, "co2": r.co2} for r in result.rows],
        result.avg_normalized_usage,
    )
    currency = (building or {}).get("currency") or cfg.currency
    return DashboardResponse(
        start=start,
        end=end,
        kpis=dashboard_kpis(
            current_totals, period_totals(previous), currency, result.anomaly_count,
        ),
        anomaly_count=result.anomaly_count,
        temperature_correlation=result.temperature_correlation,
    )


@router.get(
    "/export",
    response_class=PlainTextResponse,
    summary="Export the analytics table as CSV",
)
def export_analytics(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    building_id: Optional[int] = Query(None),
    repo: EnergyRepository = Depends(get_repository),
) -> PlainTextResponse:
    cfg = get_config()
    start, end = resolve_window(start, end, cfg)
    building = resolve_building(repo, building_id)
    result = load_analytics(repo, cfg, start, end, building)
    content = CSVGenerator().generate_analytics(
        result.rows, (building or {}).get("currency") or cfg.currency,
    )
    filename = f"energy-analytics-{start.isoformat()}-to-{end.isoformat()}.csv"
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/chart",
    summary="Daily usage chart (PNG) with anomalies highlighted",
    responses={200: {"content": {"image/png": {}}}},
)
def usage_chart(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    building_id: Optional[int] = Query(None),
    metric: str = Query("kwh", description="kwh, cost or co2"),
    repo: EnergyRepository = Depends(get_repository),
) -> Response:
    if metric not in METRIC_LABELS:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid metric '{metric}'. Valid: {sorted(METRIC_LABELS)}",
        )
    cfg = get_config()
    start, end = resolve_window(start, end, cfg)
    building = resolve_building(repo, building_id)
    result = load_analytics(repo, cfg, start, end, building)
    png = UsageCharts(cfg).daily_usage_png(result.rows, metric=metric)
    return Response(content=png, media_type="image/png")
