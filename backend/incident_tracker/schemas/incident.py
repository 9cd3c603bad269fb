"""
Incident Schemas Module
=======================

Pydantic models for incident responses and the uniform response envelope.

Wire names are camelCase (`incidentStartDate`); attributes stay
snake_case and are mapped through an alias generator.

`durationInDays` is computed when the response is built and is never
read from or written to the database.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from incident_tracker.core.enums import IncidentStatus
from incident_tracker.models.incident import Incident
from incident_tracker.services.incident_store import duration_in_days


# ==========================
# Incident Schemas
# ==========================

class IncidentResponse(BaseModel):
    """Serialized incident including derived fields."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: UUID = Field(..., description="Incident UUID")
    type: str = Field(..., description="Incident category", examples=["Network Outage"])
    incident_start_date: datetime = Field(..., description="When the incident began (UTC)")
    incident_end_date: Optional[datetime] = Field(
        default=None,
        description="When the incident ended (UTC)",
    )
    description: str = Field(..., description="What happened")
    remarks: Optional[str] = Field(default=None, description="Follow-up notes")
    status: IncidentStatus = Field(..., description="open or closed")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last modification timestamp")
    duration_in_days: int = Field(
        default=0,
        description="Days from start to end (or to now while open), rounded up",
    )

    @classmethod
    def from_incident(cls, incident: Incident, now: Optional[datetime] = None) -> "IncidentResponse":
        """Build a response, computing `durationInDays` at call time."""
        response = cls.model_validate(incident)
        response.duration_in_days = duration_in_days(
            incident.incident_start_date,
            incident.incident_end_date,
            now,
        )
        return response


# ==========================
# Envelope Schemas
# ==========================

class IncidentListEnvelope(BaseModel):
    """`{success, count, data: [...]}`"""

    success: bool = True
    count: int
    data: List[IncidentResponse]


class IncidentEnvelope(BaseModel):
    """`{success, data: {...}}`"""

    success: bool = True
    data: IncidentResponse


class IncidentMessageEnvelope(BaseModel):
    """`{success, message, data: {...}}`"""

    success: bool = True
    message: str
    data: IncidentResponse


class MessageEnvelope(BaseModel):
    """`{success, message}`"""

    success: bool = True
    message: str


class ErrorEnvelope(BaseModel):
    """
    Failure envelope.

    `errors` lists validation messages; `error` carries internal
    detail for server errors.
    """

    success: bool = False
    message: str
    errors: Optional[List[str]] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    database: str
    timestamp: datetime
