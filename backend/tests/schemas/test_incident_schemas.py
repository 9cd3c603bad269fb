"""
Incident Schema Tests
=====================

Serialization of incidents and envelopes:
- camelCase wire names
- durationInDays computed at build time
- error envelope omits empty fields
"""

import uuid
from datetime import datetime, timedelta, UTC

import pytest

from incident_tracker.core.enums import IncidentStatus
from incident_tracker.models.incident import Incident
from incident_tracker.schemas import ErrorEnvelope, IncidentMessageEnvelope, IncidentResponse


pytestmark = pytest.mark.unit

START = datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


def make_incident(**overrides) -> Incident:
    values = {
        "id": uuid.uuid4(),
        "type": "Network Outage",
        "incident_start_date": START,
        "incident_end_date": None,
        "description": "Major network outage affecting all users...",
        "remarks": None,
        "status": IncidentStatus.OPEN,
        "created_at": START,
        "updated_at": START,
    }
    values.update(overrides)
    return Incident(**values)


class TestIncidentResponse:

    def test_wire_names_are_camel_case(self):
        data = IncidentResponse.from_incident(make_incident()).model_dump(by_alias=True)

        assert set(data) == {
            "id",
            "type",
            "incidentStartDate",
            "incidentEndDate",
            "description",
            "remarks",
            "status",
            "createdAt",
            "updatedAt",
            "durationInDays",
        }

    def test_duration_for_closed_incident(self):
        incident = make_incident(
            incident_end_date=START + timedelta(hours=2, minutes=30),
            status=IncidentStatus.CLOSED,
        )
        assert IncidentResponse.from_incident(incident).duration_in_days == 1

    def test_duration_for_open_incident_uses_now(self):
        now = START + timedelta(days=4, minutes=1)
        assert IncidentResponse.from_incident(make_incident(), now=now).duration_in_days == 5

    def test_json_status_and_timestamps(self):
        data = IncidentResponse.from_incident(make_incident()).model_dump(by_alias=True, mode="json")

        assert data["status"] == "open"
        assert data["incidentStartDate"].startswith("2024-01-15T10:00:00")
        assert data["incidentEndDate"] is None

    def test_envelope(self):
        envelope = IncidentMessageEnvelope(
            message="Incident created successfully",
            data=IncidentResponse.from_incident(make_incident()),
        )
        data = envelope.model_dump(by_alias=True)

        assert data["success"] is True
        assert data["message"] == "Incident created successfully"
        assert "incidentStartDate" in data["data"]


class TestErrorEnvelope:

    def test_validation_shape(self):
        data = ErrorEnvelope(message="Validation error", errors=["a"]).model_dump(exclude_none=True)
        assert data == {"success": False, "message": "Validation error", "errors": ["a"]}

    def test_not_found_shape(self):
        data = ErrorEnvelope(message="Incident not found").model_dump(exclude_none=True)
        assert data == {"success": False, "message": "Incident not found"}
