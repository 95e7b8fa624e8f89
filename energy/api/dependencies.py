"""Shared FastAPI dependencies — singletons & service factories."""

from __future__ import annotations

from typing import Optional

from ..config import EnergyConfig
from ..database.connection import DatabaseConnection
from ..database.repository import EnergyRepository
from ..report_builder import ReportBuilder
from ..weather.meteostat_client import MeteostatClient

# Module-level singletons (initialised at startup)
_config: Optional[EnergyConfig] = None
_db_conn: Optional[DatabaseConnection] = None
_repository: Optional[EnergyRepository] = None
_report_builder: Optional[ReportBuilder] = None


def init_dependencies(config: Optional[EnergyConfig] = None) -> None:
    """Initialise shared singletons.  Called once during app startup."""
    global _config, _db_conn, _repository, _report_builder  # noqa: PLW0603
    _config = config or EnergyConfig()
    _db_conn = DatabaseConnection(_config)
    _db_conn.create_tables()
    _repository = EnergyRepository(_db_conn)
    _report_builder = ReportBuilder(_repository, _config)


def dependencies_ready() -> bool:
    """Whether :func:`init_dependencies` has run since the last shutdown."""
    return _repository is not None


def shutdown_dependencies() -> None:
    """Dispose the engine on shutdown."""
    global _db_conn, _repository, _report_builder  # noqa: PLW0603
    if _db_conn is not None:
        _db_conn.close()
    _db_conn = None
    _repository = None
    _report_builder = None


def get_config() -> EnergyConfig:
    """Return the shared :class:`EnergyConfig`."""
    if _config is None:
        init_dependencies()
    return _config  # type: ignore[return-value]


def get_db() -> DatabaseConnection:
    """Return the shared :class:`DatabaseConnection`."""
    if _db_conn is None:
        init_dependencies(_config)
    return _db_conn  # type: ignore[return-value]


def get_repository() -> EnergyRepository:
    """Return the shared :class:`EnergyRepository`."""
    if _repository is None:
        init_dependencies(_config)
    return _repository  # type: ignore[return-value]


def get_report_builder() -> ReportBuilder:
    """Return the shared :class:`ReportBuilder`."""
    if _report_builder is None:
        init_dependencies(_config)
    return _report_builder  # type: ignore[return-value]


def get_weather_client() -> Optional[MeteostatClient]:
    """Return a Meteostat client, or ``None`` when no API key is configured."""
    cfg = get_config()
    if not cfg.meteostat_api_key:
        return None
    return MeteostatClient(cfg.meteostat_api_key, timeout=cfg.meteostat_timeout)
