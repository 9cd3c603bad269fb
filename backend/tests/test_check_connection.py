"""
Connection Check Tests
======================

The smoke-test CLI against an in-memory database.
"""

import pytest

from incident_tracker import check_connection
from incident_tracker.db.session import Database
from incident_tracker.services.incident_store import IncidentStore


pytestmark = pytest.mark.unit


class TestRunChecks:

    def test_run_checks_cleans_up(self, database: Database, store: IncidentStore):
        summary = check_connection.run_checks(database)

        assert summary["total"] == 1
        assert summary["open"] == 0
        assert len(summary["validation_errors"]) == 2
        assert store.find_all() == []

    def test_run_checks_keep(self, database: Database, store: IncidentStore):
        summary = check_connection.run_checks(database, keep=True)

        incidents = store.find_all()
        assert [str(i.id) for i in incidents] == [summary["incident_id"]]
        assert incidents[0].remarks == "Updated remarks after investigation completion"


class TestMain:

    def test_main_fails_on_unreachable_database(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path}/missing/dir/incidents.db")
        check_connection.get_settings.cache_clear()
        try:
            assert check_connection.main([]) == 1
        finally:
            check_connection.get_settings.cache_clear()
