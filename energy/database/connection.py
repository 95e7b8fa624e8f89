"""Database connection management — engine, session factory, health probe."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import EnergyConfig
from ..telemetry import get_logger

_logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_conn: Any, _record: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseConnection:
    """Own the SQLAlchemy engine and hand out transactional sessions.

    SQLite URLs get foreign-key enforcement.  In-memory URLs (``:memory:``
    or a bare ``sqlite://``) share a single connection so every session
    sees the same database.

    Args:
        config: Energy configuration (uses ``database_url``).
    """

    def __init__(self, config: Optional[EnergyConfig] = None) -> None:
        self.config = config or EnergyConfig()
        url = self.config.database_url
        is_sqlite = url.startswith("sqlite")

        engine_kwargs: Dict[str, Any] = {}
        if is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url.rstrip("/") == "sqlite:":
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_size"] = 5
            engine_kwargs["max_overflow"] = 10
            engine_kwargs["pool_pre_ping"] = True

        self._engine: Engine = create_engine(url, **engine_kwargs)
        if is_sqlite:
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_tables(self) -> None:
        """Create all ORM tables from :data:`Base.metadata`."""
        from .models import Base

        Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a :class:`Session` wrapped in a transaction.

        Commits on success; on any exception rolls back and re-raises.
        """
        sess: Session = self._session_factory()
        try:
            yield sess
            sess.commit()
        except Exception:
            sess.rollback()
            _logger.warning("Transaction rolled back", exc_info=True)
            raise
        finally:
            sess.close()

    def ping(self) -> bool:
        """Return ``True`` when a trivial query succeeds."""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            _logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        """Dispose the engine and release the connection pool."""
        self._engine.dispose()
        _logger.info("Database connection closed")
