"""Meteostat client — daily observations and nearby stations via RapidAPI."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from datetime import date
from typing import Any, Dict, List

from ..telemetry import get_logger, weather_requests_total

_logger = get_logger(__name__)

METEOSTAT_HOST = "meteostat.p.rapidapi.com"


class WeatherServiceError(RuntimeError):
    """The weather service could not be reached or answered with an error."""

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


class MeteostatClient:
    """Fetch weather data from the Meteostat RapidAPI endpoints.

    Args:
        api_key: RapidAPI key.
        timeout: HTTP request timeout in seconds.
        base_url: Override for the API root (tests, proxies).
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        base_url: str = f"https://{METEOSTAT_HOST}",
    ) -> None:
        if not api_key:
            raise ValueError("Meteostat API key not configured")
        self._api_key = api_key
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    def daily(self, station: str, start: date, end: date) -> List[Dict[str, Any]]:
        """Return raw daily rows for *station* between *start* and *end*."""
        payload = self._get("stations/daily", {
            "station": station,
            "start": start.isoformat(),
            "end": end.isoformat(),
        })
        return list(payload.get("data") or [])

    def nearby_stations(self, lat: float, lon: float, limit: int = 10) -> List[Dict[str, Any]]:
        """Return stations closest to (*lat*, *lon*)."""
        payload = self._get("stations/nearby", {"lat": lat, "lon": lon, "limit": limit})
        return list(payload.get("data") or [])

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._base_url}/{endpoint}?{urllib.parse.urlencode(params)}"
        req = urllib.request.Request(
            url,
            headers={
                "X-RapidAPI-Key": self._api_key,
                "X-RapidAPI-Host": METEOSTAT_HOST,
                "Accept": "application/json",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as exc:
            weather_requests_total.labels(endpoint=endpoint, outcome="error").inc()
            _logger.warning("Meteostat %s returned HTTP %s", endpoint, exc.code)
            raise WeatherServiceError(
                f"Meteostat API error: {exc.code} {exc.reason}", status=exc.code,
            ) from exc
        except (urllib.error.URLError, OSError) as exc:
            weather_requests_total.labels(endpoint=endpoint, outcome="error").inc()
            _logger.warning("Meteostat %s unreachable: %s", endpoint, exc)
            raise WeatherServiceError(f"Meteostat API unreachable: {exc}") from exc

        try:
            payload = json.loads(body.decode("utf-8"))
        except ValueError as exc:
            weather_requests_total.labels(endpoint=endpoint, outcome="error").inc()
            raise WeatherServiceError("Meteostat API returned invalid JSON") from exc

        weather_requests_total.labels(endpoint=endpoint, outcome="ok").inc()
        return payload if isinstance(payload, dict) else {}
