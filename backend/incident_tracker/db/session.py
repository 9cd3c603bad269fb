"""
Database Session Management Module
==================================

Responsible for:
- Creating the database engine
- Managing session lifecycle
- Providing the session dependency for FastAPI routes
- Connection health checks

The `Database` object is constructed once by the application lifespan
and stored on `app.state`; nothing in this module holds a process-wide
engine.
"""

from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from incident_tracker.core.config import Settings
from incident_tracker.core.exceptions import ConnectivityError
from incident_tracker.core.logging import get_logger
from incident_tracker.db.base import Base

# Initialize logger
logger = get_logger(__name__)


class Database:
    """
    Owned database resource: engine plus session factory.

    Usage:
        database = Database.from_settings(settings)
        database.connect()
        with database.session() as db:
            ...
        database.dispose()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the resource around an existing engine.

        Args:
            engine: SQLAlchemy engine
        """
        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        @event.listens_for(engine, "connect")
        def receive_connect(dbapi_connection, connection_record):
            logger.debug("db_connect", url=engine.url.render_as_string(hide_password=True))

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """
        Build a Database from application settings.

        SQLite URLs get `check_same_thread` disabled so sessions can be
        used from FastAPI's threadpool; in-memory SQLite additionally
        shares a single connection.
        """
        url = settings.DATABASE_URL
        kwargs: dict = {"echo": settings.DEBUG, "future": True}

        if settings.is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
            kwargs["connect_args"] = {"connect_timeout": settings.DB_CONNECT_TIMEOUT}

        return cls(create_engine(url, **kwargs))

    def connect(self) -> None:
        """
        Verify the database is reachable.

        Raises:
            ConnectivityError: if a round trip to the database fails
        """
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("database_connection_failed", error=str(e))
            raise ConnectivityError(str(e)) from e

        logger.info(
            "database_connected",
            url=self.engine.url.render_as_string(hide_password=True),
        )

    def is_connected(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("database_health_check_failed", error=str(e))
            return False

    def create_schema(self) -> None:
        """Create missing tables. Production schemas are managed by Alembic."""
        # Import models so they register on Base.metadata
        from incident_tracker.models.incident import Incident  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        """Open a new session. The caller is responsible for closing it."""
        return self._session_factory()

    def dispose(self) -> None:
        """Release all pooled connections."""
        self.engine.dispose()
        logger.info("database_connection_closed")


# ==========================
# Dependency for FastAPI
# ==========================

def get_database(request: Request) -> Database:
    """Return the Database owned by the running application."""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise ConnectivityError("Database is not initialized")
    return database


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Ensures:
    - Session is opened per request
    - Session is properly closed after request completes
    - Transactions are rolled back on error

    Yields:
        SQLAlchemy Session object
    """
    db = get_database(request).session()
    try:
        yield db
    except Exception as e:
        if isinstance(e, SQLAlchemyError):
            logger.error("database_session_error", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()
