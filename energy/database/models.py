"""SQLAlchemy ORM models for buildings, energy readings, weather and alerts."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


class Building(Base):
    """A monitored building and its settings."""

    __tablename__ = "buildings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False)
    address = Column(String(512), nullable=False)
    latitude = Column(Float, default=0.0)
    longitude = Column(Float, default=0.0)
    floor_area = Column(Float, default=0.0)
    building_type = Column(String(64), default="Office")
    construction_year = Column(Integer, nullable=True)
    heating_system = Column(String(64), default="")
    cooling_system = Column(String(64), default="")
    energy_tariff = Column(Float, default=0.12)
    co2_factor = Column(Float, default=0.4)
    weather_station = Column(String(32), default="10637")
    timezone = Column(String(64), default="Europe/Berlin")
    currency = Column(String(8), default="EUR")

    notify_anomalies = Column(Boolean, default=True)
    notify_monthly_reports = Column(Boolean, default=True)
    notify_maintenance = Column(Boolean, default=True)
    notify_cost_thresholds = Column(Boolean, default=True)

    high_usage_alert = Column(Float, default=300.0)
    cost_alert = Column(Float, default=50.0)
    anomaly_score_alert = Column(Float, default=0.7)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    readings = relationship(
        "EnergyReading", back_populates="building", cascade="all, delete-orphan",
    )
    alerts = relationship(
        "Alert", back_populates="building", cascade="all, delete-orphan",
    )


class EnergyReading(Base):
    """A single metered energy sample."""

    __tablename__ = "energy_readings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=True, index=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    kwh = Column(Float, nullable=False)
    cost = Column(Float, nullable=False)
    co2 = Column(Float, default=0.0)
    source = Column(String(128), default="API Upload")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    building = relationship("Building", back_populates="readings")


class WeatherData(Base):
    """Daily weather observations for a station."""

    __tablename__ = "weather_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    station = Column(String(32), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    avg_temp = Column(Float, default=0.0)
    min_temp = Column(Float, default=0.0)
    max_temp = Column(Float, default=0.0)
    precipitation = Column(Float, default=0.0)
    wind_speed = Column(Float, default=0.0)
    pressure = Column(Float, default=0.0)
    heating_degree_days = Column(Float, default=0.0)
    cooling_degree_days = Column(Float, default=0.0)
    fetched_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("station", "date", name="uq_weather_station_date"),
    )


class Alert(Base):
    """A raised usage, cost or anomaly alert."""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=True, index=True)
    alert_type = Column(String(32), nullable=False, index=True)
    severity = Column(String(16), default="warning")
    message = Column(Text, default="")
    value = Column(Float, default=0.0)
    threshold = Column(Float, default=0.0)
    date = Column(Date, nullable=True, index=True)
    acknowledged = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    building = relationship("Building", back_populates="alerts")
