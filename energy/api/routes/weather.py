"""Weather endpoints — daily observations with degree days, station search."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_config, get_repository, get_weather_client
from ..models import StationSearchRequest, StationsResponse, WeatherResponse
from ...database.repository import EnergyRepository
from ...weather.degree_days import process_daily, summarize_weather
from ...weather.meteostat_client import MeteostatClient, WeatherServiceError

router = APIRouter(tags=["weather"])


def _require_client(client: Optional[MeteostatClient]) -> MeteostatClient:
    if client is None:
        raise HTTPException(status_code=500, detail="Meteostat API key not configured")
    return client


@router.get(
    "",
    response_model=WeatherResponse,
    summary="Daily weather with heating and cooling degree days",
)
def get_weather(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    station: Optional[str] = Query(None),
    repo: EnergyRepository = Depends(get_repository),
    client: Optional[MeteostatClient] = Depends(get_weather_client),
) -> WeatherResponse:
    """Fetch days from Meteostat and cache them for analytics."""
    if start is None or end is None:
        raise HTTPException(status_code=400, detail="Start date and end date are required")
    if end < start:
        raise HTTPException(status_code=400, detail="end must not precede start")

    cfg = get_config()
    station = station or cfg.weather_station
    meteostat = _require_client(client)
    try:
        raw = meteostat.daily(station, start, end)
    except WeatherServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    days = process_daily(raw, base=cfg.degree_day_base)
    repo.upsert_weather(days, station)
    return WeatherResponse(
        data=days,
        summary=summarize_weather(days),
        station=station,
        date_range={"start": start, "end": end},
    )


@router.post(
    "/stations",
    response_model=StationsResponse,
    summary="Weather stations near a location",
)
def nearby_stations(
    request: StationSearchRequest,
    client: Optional[MeteostatClient] = Depends(get_weather_client),
) -> StationsResponse:
    if request.lat is None or request.lon is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude are required")
    meteostat = _require_client(client)
    try:
        stations = meteostat.nearby_stations(request.lat, request.lon, request.limit)
    except WeatherServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return StationsResponse(
        stations=stations,
        location={"lat": request.lat, "lon": request.lon},
    )
