"""
Application-Level Route Tests
=============================

- GET / descriptor
- GET /health
- Catch-all 404
- Error envelopes for store and unexpected failures
- Request id and CORS headers
- Startup failure when the database is unreachable
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from incident_tracker.core.config import Settings
from incident_tracker.core.exceptions import ConnectivityError
from incident_tracker.db.session import Database
from incident_tracker.main import create_app
from incident_tracker.services.incident_store import IncidentStore


pytestmark = pytest.mark.integration


def broken_find_all(self):
    raise OperationalError("SELECT", {}, Exception("database is locked"))


class TestRootEndpoint:

    def test_descriptor(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Incident Management API",
            "version": "1.0.0",
            "endpoints": {"incidents": "/api/incidents", "health": "/health"},
        }


class TestHealthEndpoint:

    def test_connected(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["database"] == "Connected"
        assert "timestamp" in body

    def test_disconnected(self, client: TestClient, database: Database, monkeypatch):
        monkeypatch.setattr(database, "is_connected", lambda: False)

        assert client.get("/health").json()["database"] == "Disconnected"


class TestCatchAll:

    def test_unknown_route(self, client: TestClient):
        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}

    def test_method_not_allowed_uses_envelope(self, client: TestClient):
        response = client.patch("/api/incidents")

        assert response.status_code == 405
        assert response.json()["success"] is False


class TestServerErrors:

    def test_store_failure(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(IncidentStore, "find_all", broken_find_all)

        response = client.get("/api/incidents")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Server error"
        assert "database is locked" in body["error"]

    def test_store_failure_detail_hidden_in_production(self, database: Database, monkeypatch):
        settings = Settings(ENVIRONMENT="production", DATABASE_URL="sqlite:///:memory:")
        monkeypatch.setattr(IncidentStore, "find_all", broken_find_all)

        with TestClient(create_app(settings=settings, database=database)) as client:
            response = client.get("/api/incidents")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"

    def test_unexpected_exception(self, app):
        @app.get("/boom")
        def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Something went wrong!"
        assert body["error"] == "kaboom"


    def test_unexpected_exception_detail_hidden_in_production(self, database: Database):
        settings = Settings(ENVIRONMENT="production", DATABASE_URL="sqlite:///:memory:")
        app = create_app(settings=settings, database=database)

        @app.get("/boom")
        def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Something went wrong!"
        assert body["error"] == "Internal server error"


class TestMiddleware:

    def test_request_id_generated(self, client: TestClient):
        response = client.get("/api/incidents")

        assert response.headers["X-Request-ID"]
        assert float(response.headers["X-Process-Time"]) >= 0

    def test_request_id_propagated(self, client: TestClient):
        response = client.get("/api/incidents", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_cors_allows_any_origin(self, client: TestClient):
        response = client.get("/api/incidents", headers={"Origin": "http://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestStartup:

    def test_unreachable_database_aborts_startup(self, tmp_path):
        settings = Settings(DATABASE_URL=f"sqlite:///{tmp_path}/missing/dir/incidents.db")
        app = create_app(settings=settings)

        with pytest.raises(ConnectivityError):
            with TestClient(app):
                pass

    def test_failed_startup_disposes_engine(self, tmp_path, monkeypatch):
        disposed = []
        monkeypatch.setattr(Database, "dispose", lambda self: disposed.append(self))
        settings = Settings(DATABASE_URL=f"sqlite:///{tmp_path}/missing/dir/incidents.db")
        app = create_app(settings=settings)

        with pytest.raises(ConnectivityError):
            with TestClient(app):
                pass

        assert disposed == [app.state.database]
