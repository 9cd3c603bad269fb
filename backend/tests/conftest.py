"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- SQLite in-memory database per test
- TestClient wired through the app factory
- Store fixture sharing the client's database
- Sample incident payloads
"""

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

# Set testing environment before importing app modules
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from incident_tracker.core.config import Settings
from incident_tracker.db.session import Database
from incident_tracker.main import create_app
from incident_tracker.services.incident_store import IncidentStore


# =====================================
# Database Fixtures
# =====================================

@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated in-memory database."""
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL="sqlite:///:memory:",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def database(settings: Settings) -> Generator[Database, None, None]:
    """
    Fresh in-memory database with the schema created.

    StaticPool keeps a single connection, so every session sees the
    same data.
    """
    database = Database.from_settings(settings)
    database.create_schema()
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture
def db_session(database: Database) -> Generator[Session, None, None]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session: Session) -> IncidentStore:
    return IncidentStore(db_session)


# =====================================
# Client Fixtures
# =====================================

@pytest.fixture
def app(settings: Settings, database: Database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """TestClient with the lifespan running against the test database."""
    with TestClient(app) as test_client:
        yield test_client


# =====================================
# Payload Fixtures
# =====================================

@pytest.fixture
def incident_payload() -> dict:
    """A valid closed incident lasting two and a half hours."""
    return {
        "type": "Network Outage",
        "incidentStartDate": "2024-01-15T10:00:00Z",
        "incidentEndDate": "2024-01-15T12:30:00Z",
        "description": "Major network outage affecting all users...",
        "status": "closed",
    }


@pytest.fixture
def open_incident_payload() -> dict:
    """A valid incident with no end date and no explicit status."""
    return {
        "type": "Database Latency",
        "incidentStartDate": "2024-02-01T08:00:00Z",
        "description": "Primary database responding slowly to writes",
        "remarks": "  Monitoring  ",
    }
