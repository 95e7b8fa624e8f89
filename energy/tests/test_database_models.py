"""Tests for database ORM models."""

from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from energy.database.models import Alert, Base, Building, EnergyReading, WeatherData


@pytest.fixture
def engine():
    eng = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine):
    with Session(engine) as sess:
        yield sess


class TestBuildingModel:
    def test_defaults(self, session: Session) -> None:
        building = Building(name="HQ", address="Main St 1")
        session.add(building)
        session.commit()

        assert building.id is not None
        assert building.currency == "EUR"
        assert building.high_usage_alert == 300.0
        assert building.notify_anomalies is True
        assert isinstance(building.created_at, datetime)

    def test_delete_cascades(self, session: Session) -> None:
        building = Building(name="HQ", address="Main St 1")
        building.readings.append(
            EnergyReading(timestamp=datetime(2025, 1, 1), kwh=10.0, cost=1.2),
        )
        building.alerts.append(Alert(alert_type="cost", date=date(2025, 1, 1)))
        session.add(building)
        session.commit()

        session.delete(building)
        session.commit()
        assert session.scalars(select(EnergyReading)).all() == []
        assert session.scalars(select(Alert)).all() == []


class TestEnergyReadingModel:
    def test_defaults(self, session: Session) -> None:
        reading = EnergyReading(timestamp=datetime(2025, 1, 1, 8), kwh=125.5, cost=15.06)
        session.add(reading)
        session.commit()

        assert reading.co2 == 0.0
        assert reading.source == "API Upload"
        assert reading.building_id is None

    def test_kwh_required(self, session: Session) -> None:
        session.add(EnergyReading(timestamp=datetime(2025, 1, 1), cost=1.0))
        with pytest.raises(IntegrityError):
            session.commit()


class TestWeatherDataModel:
    def test_station_date_unique(self, session: Session) -> None:
        session.add(WeatherData(station="10637", date=date(2025, 1, 1), avg_temp=3.0))
        session.commit()
        session.add(WeatherData(station="10637", date=date(2025, 1, 1), avg_temp=4.0))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_same_day_other_station(self, session: Session) -> None:
        session.add_all([
            WeatherData(station="10637", date=date(2025, 1, 1)),
            WeatherData(station="10384", date=date(2025, 1, 1)),
        ])
        session.commit()
        assert len(session.scalars(select(WeatherData)).all()) == 2


class TestAlertModel:
    def test_defaults(self, session: Session) -> None:
        alert = Alert(alert_type="high_usage", value=420.0, threshold=300.0)
        session.add(alert)
        session.commit()

        assert alert.severity == "warning"
        assert alert.acknowledged is False
        assert alert.building is None
