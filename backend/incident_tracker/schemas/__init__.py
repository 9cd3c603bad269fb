"""
Schemas Package Initialization
==============================

Exports all Pydantic schemas for the application.

Usage:
    from incident_tracker.schemas import IncidentResponse, ErrorEnvelope
"""

from incident_tracker.schemas.incident import (
    ErrorEnvelope,
    HealthResponse,
    IncidentEnvelope,
    IncidentListEnvelope,
    IncidentMessageEnvelope,
    IncidentResponse,
    MessageEnvelope,
)

__all__ = [
    "ErrorEnvelope",
    "HealthResponse",
    "IncidentEnvelope",
    "IncidentListEnvelope",
    "IncidentMessageEnvelope",
    "IncidentResponse",
    "MessageEnvelope",
]
