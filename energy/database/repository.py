"""Energy repository — readings, buildings, weather and alerts."""

from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, select

from .connection import DatabaseConnection
from .models import Alert, Building, EnergyReading, WeatherData
from ..schema import AlertRecord, BuildingSettings, EnergyReadingIn, WeatherDay
from ..telemetry import database_operations_total, get_logger, readings_ingested_total

_logger = get_logger(__name__)


def to_naive_utc(value: datetime) -> datetime:
    """Normalise *value* to a naive UTC datetime as stored in the database."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class EnergyRepository:
    """High-level data-access layer over the energy database.

    Args:
        connection: A :class:`DatabaseConnection` instance.
    """

    def __init__(self, connection: DatabaseConnection) -> None:
        self._conn = connection

    # ------------------------------------------------------------------
    # Energy readings
    # ------------------------------------------------------------------

    def insert_readings(
        self,
        rows: Sequence[EnergyReadingIn],
        building_id: Optional[int] = None,
    ) -> int:
        """Store *rows* in a single transaction.

        Readings whose timestamp is already stored for the same building, or
        repeated within the batch, are skipped.

        Args:
            rows: Validated readings.
            building_id: Optional owning building.

        Returns:
            Number of readings created.
        """
        if not rows:
            return 0
        stamps = [to_naive_utc(r.timestamp) for r in rows]
        with self._conn.session() as sess:
            stmt = select(EnergyReading.timestamp).where(
                EnergyReading.timestamp.in_(list(set(stamps))),
                EnergyReading.building_id.is_(None)
                if building_id is None
                else EnergyReading.building_id == building_id,
            )
            seen = set(sess.execute(stmt).scalars().all())

            created = 0
            per_source: Dict[str, int] = {}
            for row, ts in zip(rows, stamps):
                if ts in seen:
                    continue
                seen.add(ts)
                sess.add(EnergyReading(
                    building_id=building_id,
                    timestamp=ts,
                    kwh=row.kwh,
                    cost=row.cost,
                    co2=row.co2,
                    source=row.source,
                ))
                created += 1
                per_source[row.source] = per_source.get(row.source, 0) + 1

        for source, count in per_source.items():
            readings_ingested_total.labels(source=source).inc(count)
        database_operations_total.labels(operation="insert_readings").inc()
        skipped = len(rows) - created
        if skipped:
            _logger.info("Skipped %d duplicate readings", skipped)
        return created

    def list_readings(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        source: Optional[str] = None,
        limit: Optional[int] = None,
        building_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return readings newest-first, filtered by range, source and building."""
        stmt = select(EnergyReading)
        if start is not None:
            stmt = stmt.where(EnergyReading.timestamp >= to_naive_utc(start))
        if end is not None:
            stmt = stmt.where(EnergyReading.timestamp <= to_naive_utc(end))
        if source:
            stmt = stmt.where(EnergyReading.source == source)
        if building_id is not None:
            stmt = stmt.where(EnergyReading.building_id == building_id)
        stmt = stmt.order_by(EnergyReading.timestamp.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._conn.session() as sess:
            rows = sess.execute(stmt).scalars().all()
            return [self._reading_to_dict(r) for r in rows]

    @staticmethod
    def summarize(readings: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        """Aggregate totals over reading dictionaries.

        Returns:
            Dict with ``total_records``, ``total_kwh``, ``total_cost``,
            ``total_co2``, ``avg_kwh`` and ``date_range`` (``None`` when
            *readings* is empty).
        """
        if not readings:
            return {
                "total_records": 0,
                "total_kwh": 0.0,
                "total_cost": 0.0,
                "total_co2": 0.0,
                "avg_kwh": 0.0,
                "date_range": None,
            }
        total_kwh = sum(r["kwh"] for r in readings)
        stamps = [r["timestamp"] for r in readings]
        return {
            "total_records": len(readings),
            "total_kwh": total_kwh,
            "total_cost": sum(r["cost"] for r in readings),
            "total_co2": sum(r["co2"] for r in readings),
            "avg_kwh": total_kwh / len(readings),
            "date_range": {"start": min(stamps), "end": max(stamps)},
        }

    def delete_reading(self, reading_id: int) -> bool:
        """Delete one reading. Returns ``False`` when the id is unknown."""
        with self._conn.session() as sess:
            row = sess.get(EnergyReading, reading_id)
            if row is None:
                return False
            sess.delete(row)
        database_operations_total.labels(operation="delete_reading").inc()
        return True

    def delete_readings_between(self, start: datetime, end: datetime) -> int:
        """Delete readings with ``start <= timestamp <= end``.

        Returns:
            Number of deleted rows.
        """
        with self._conn.session() as sess:
            stmt = delete(EnergyReading).where(
                EnergyReading.timestamp >= to_naive_utc(start),
                EnergyReading.timestamp <= to_naive_utc(end),
            )
            result = sess.execute(stmt)
        database_operations_total.labels(operation="delete_readings").inc()
        return result.rowcount  # type: ignore[return-value]

    def daily_totals(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        building_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Sum readings per calendar day (UTC), oldest day first.

        Returns:
            List of ``{"date", "kwh", "cost", "co2", "count"}`` dicts.
        """
        readings = self.list_readings(start=start, end=end, building_id=building_id)
        days: "OrderedDict[date, Dict[str, Any]]" = OrderedDict()
        for r in sorted(readings, key=lambda r: r["timestamp"]):
            day = r["timestamp"].date()
            bucket = days.setdefault(
                day, {"date": day, "kwh": 0.0, "cost": 0.0, "co2": 0.0, "count": 0},
            )
            bucket["kwh"] += r["kwh"]
            bucket["cost"] += r["cost"]
            bucket["co2"] += r["co2"]
            bucket["count"] += 1
        return list(days.values())

    def count_readings(self) -> int:
        with self._conn.session() as sess:
            return int(sess.execute(select(func.count(EnergyReading.id))).scalar_one())

    # ------------------------------------------------------------------
    # Buildings
    # ------------------------------------------------------------------

    def create_building(self, settings: BuildingSettings) -> Dict[str, Any]:
        """Persist a new building and return it as a dictionary."""
        with self._conn.session() as sess:
            building = Building(**self._settings_to_columns(settings))
            sess.add(building)
            sess.flush()
            result = self._building_to_dict(building)
        database_operations_total.labels(operation="create_building").inc()
        _logger.info("Created building %s", result["id"])
        return result

    def get_building(self, building_id: int) -> Optional[Dict[str, Any]]:
        with self._conn.session() as sess:
            row = sess.get(Building, building_id)
            return None if row is None else self._building_to_dict(row)

    def list_buildings(self) -> List[Dict[str, Any]]:
        with self._conn.session() as sess:
            rows = sess.execute(select(Building).order_by(Building.id)).scalars().all()
            return [self._building_to_dict(r) for r in rows]

    def update_building(
        self, building_id: int, settings: BuildingSettings,
    ) -> Optional[Dict[str, Any]]:
        """Replace a building's settings. Returns ``None`` for an unknown id."""
        with self._conn.session() as sess:
            row = sess.get(Building, building_id)
            if row is None:
                return None
            for key, value in self._settings_to_columns(settings).items():
                setattr(row, key, value)
            sess.flush()
            result = self._building_to_dict(row)
        database_operations_total.labels(operation="update_building").inc()
        return result

    def delete_building(self, building_id: int) -> bool:
        """Delete a building together with its readings and alerts."""
        with self._conn.session() as sess:
            row = sess.get(Building, building_id)
            if row is None:
                return False
            sess.delete(row)
        database_operations_total.labels(operation="delete_building").inc()
        return True

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------

    def upsert_weather(self, days: Iterable[WeatherDay], station: str) -> int:
        """Insert or refresh weather rows for *station*.

        Returns:
            Number of rows written.
        """
        written = 0
        with self._conn.session() as sess:
            for day in days:
                stmt = select(WeatherData).where(
                    WeatherData.station == station, WeatherData.date == day.date,
                )
                row = sess.execute(stmt).scalar_one_or_none()
                if row is None:
                    row = WeatherData(station=station, date=day.date)
                    sess.add(row)
                for key, value in day.model_dump(exclude={"date"}).items():
                    setattr(row, key, value)
                written += 1
        database_operations_total.labels(operation="upsert_weather").inc()
        return written

    def get_weather(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        station: Optional[str] = None,
    ) -> List[WeatherDay]:
        """Return stored weather days ordered by date."""
        stmt = select(WeatherData)
        if station:
            stmt = stmt.where(WeatherData.station == station)
        if start is not None:
            stmt = stmt.where(WeatherData.date >= start)
        if end is not None:
            stmt = stmt.where(WeatherData.date <= end)
        stmt = stmt.order_by(WeatherData.date)
        with self._conn.session() as sess:
            rows = sess.execute(stmt).scalars().all()
            return [
                WeatherDay(
                    date=r.date,
                    avg_temp=r.avg_temp or 0.0,
                    min_temp=r.min_temp or 0.0,
                    max_temp=r.max_temp or 0.0,
                    precipitation=r.precipitation or 0.0,
                    wind_speed=r.wind_speed or 0.0,
                    pressure=r.pressure or 0.0,
                    heating_degree_days=r.heating_degree_days or 0.0,
                    cooling_degree_days=r.cooling_degree_days or 0.0,
                )
                for r in rows
            ]

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def insert_alerts(self, alerts: Sequence[AlertRecord]) -> List[int]:
        """Store *alerts* and return their ids."""
        with self._conn.session() as sess:
            rows = [
                Alert(
                    building_id=a.building_id,
                    alert_type=a.alert_type.value,
                    severity=a.severity.value,
                    message=a.message,
                    value=a.value,
                    threshold=a.threshold,
                    date=a.date,
                )
                for a in alerts
            ]
            sess.add_all(rows)
            sess.flush()
            ids = [int(r.id) for r in rows]
        database_operations_total.labels(operation="insert_alerts").inc()
        return ids

    def list_alerts(
        self,
        acknowledged: Optional[bool] = None,
        building_id: Optional[int] = None,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        """Return alerts newest-first."""
        stmt = select(Alert)
        if acknowledged is not None:
            stmt = stmt.where(Alert.acknowledged == acknowledged)
        if building_id is not None:
            stmt = stmt.where(Alert.building_id == building_id)
        stmt = stmt.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit)
        with self._conn.session() as sess:
            rows = sess.execute(stmt).scalars().all()
            return [self._alert_to_dict(r) for r in rows]

    def get_alert(self, alert_id: int) -> Optional[Dict[str, Any]]:
        with self._conn.session() as sess:
            row = sess.get(Alert, alert_id)
            return None if row is None else self._alert_to_dict(row)

    def acknowledge_alert(self, alert_id: int) -> bool:
        with self._conn.session() as sess:
            row = sess.get(Alert, alert_id)
            if row is None:
                return False
            row.acknowledged = True
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _settings_to_columns(settings: BuildingSettings) -> Dict[str, Any]:
        data = settings.model_dump(exclude={"notifications", "thresholds"})
        data.update(
            notify_anomalies=settings.notifications.anomaly_alerts,
            notify_monthly_reports=settings.notifications.monthly_reports,
            notify_maintenance=settings.notifications.maintenance_reminders,
            notify_cost_thresholds=settings.notifications.cost_thresholds,
            high_usage_alert=settings.thresholds.high_usage_alert,
            cost_alert=settings.thresholds.cost_alert,
            anomaly_score_alert=settings.thresholds.anomaly_score,
        )
        return data

    @staticmethod
    def _reading_to_dict(row: EnergyReading) -> Dict[str, Any]:
        return {
            "id": row.id,
            "building_id": row.building_id,
            "timestamp": row.timestamp,
            "kwh": row.kwh,
            "cost": row.cost,
            "co2": row.co2 or 0.0,
            "source": row.source,
        }

    @staticmethod
    def _building_to_dict(row: Building) -> Dict[str, Any]:
        return {
            "id": row.id,
            "name": row.name,
            "address": row.address,
            "latitude": row.latitude,
            "longitude": row.longitude,
            "floor_area": row.floor_area,
            "building_type": row.building_type,
            "construction_year": row.construction_year,
            "heating_system": row.heating_system,
            "cooling_system": row.cooling_system,
            "energy_tariff": row.energy_tariff,
            "co2_factor": row.co2_factor,
            "weather_station": row.weather_station,
            "timezone": row.timezone,
            "currency": row.currency,
            "notifications": {
                "anomaly_alerts": row.notify_anomalies,
                "monthly_reports": row.notify_monthly_reports,
                "maintenance_reminders": row.notify_maintenance,
                "cost_thresholds": row.notify_cost_thresholds,
            },
            "thresholds": {
                "high_usage_alert": row.high_usage_alert,
                "cost_alert": row.cost_alert,
                "anomaly_score": row.anomaly_score_alert,
            },
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }

    @staticmethod
    def _alert_to_dict(row: Alert) -> Dict[str, Any]:
        return {
            "id": row.id,
            "building_id": row.building_id,
            "alert_type": row.alert_type,
            "severity": row.severity,
            "message": row.message,
            "value": row.value,
            "threshold": row.threshold,
            "date": row.date,
            "acknowledged": bool(row.acknowledged),
            "created_at": row.created_at,
        }
