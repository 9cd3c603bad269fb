"""
Incident Routes Module
======================

CRUD endpoints for incidents, mounted under `/api/incidents`.

Every response uses the `{success, ...}` envelope. Store errors are not
caught here: `ValidationError`, `NotFoundError` and the rest are mapped
to responses by the exception handlers registered in
`incident_tracker.main`.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from incident_tracker.core.exceptions import ValidationError
from incident_tracker.db.session import get_db
from incident_tracker.schemas import (
    ErrorEnvelope,
    IncidentEnvelope,
    IncidentListEnvelope,
    IncidentMessageEnvelope,
    IncidentResponse,
    MessageEnvelope,
)
from incident_tracker.services.incident_store import IncidentStore

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/api/incidents",
    tags=["Incidents"],
    responses={
        400: {"model": ErrorEnvelope, "description": "Validation error or malformed id"},
        500: {"model": ErrorEnvelope, "description": "Server error"},
    },
)


# =====================================
# Dependencies
# =====================================

def get_incident_store(db: Session = Depends(get_db)) -> IncidentStore:
    """Incident store bound to the request's session."""
    return IncidentStore(db)


async def get_payload(request: Request) -> Dict[str, Any]:
    """
    Read the request body as a flat dict.

    JSON objects and URL-encoded or multipart forms are accepted. An
    empty body is an empty payload.

    Raises:
        ValidationError: if the body is not valid JSON or not an object
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body.strip():
        return {}

    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError(["Request body must be valid JSON"]) from None

    if not isinstance(payload, dict):
        raise ValidationError(["Request body must be a JSON object"])
    return payload


# =====================================
# Query Endpoints
# =====================================

@router.get(
    "",
    response_model=IncidentListEnvelope,
    summary="List Incidents",
    description="All incidents, newest first.",
)
def list_incidents(store: IncidentStore = Depends(get_incident_store)) -> IncidentListEnvelope:
    incidents = store.find_all()
    return IncidentListEnvelope(
        count=len(incidents),
        data=[IncidentResponse.from_incident(incident) for incident in incidents],
    )


@router.get(
    "/open",
    response_model=IncidentListEnvelope,
    summary="List Open Incidents",
    description="Incidents whose status is open, newest first.",
)
def list_open_incidents(store: IncidentStore = Depends(get_incident_store)) -> IncidentListEnvelope:
    incidents = store.find_open()
    return IncidentListEnvelope(
        count=len(incidents),
        data=[IncidentResponse.from_incident(incident) for incident in incidents],
    )


@router.get(
    "/{incident_id}",
    response_model=IncidentEnvelope,
    summary="Get Incident",
    responses={404: {"model": ErrorEnvelope, "description": "Incident not found"}},
)
def get_incident(
    incident_id: str,
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentEnvelope:
    incident = store.find_by_id(incident_id)
    return IncidentEnvelope(data=IncidentResponse.from_incident(incident))


# =====================================
# Mutation Endpoints
# =====================================

@router.post(
    "",
    response_model=IncidentMessageEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Incident",
    description="Validate and store a new incident. Status defaults to open.",
)
def create_incident(
    payload: Dict[str, Any] = Depends(get_payload),
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentMessageEnvelope:
    incident = store.create(payload)
    return IncidentMessageEnvelope(
        message="Incident created successfully",
        data=IncidentResponse.from_incident(incident),
    )


@router.put(
    "/{incident_id}",
    response_model=IncidentMessageEnvelope,
    summary="Update Incident",
    description="Merge the given fields into an incident. The merged result is validated in full.",
    responses={404: {"model": ErrorEnvelope, "description": "Incident not found"}},
)
def update_incident(
    incident_id: str,
    payload: Dict[str, Any] = Depends(get_payload),
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentMessageEnvelope:
    incident = store.update(incident_id, payload)
    return IncidentMessageEnvelope(
        message="Incident updated successfully",
        data=IncidentResponse.from_incident(incident),
    )


@router.delete(
    "/{incident_id}",
    response_model=MessageEnvelope,
    summary="Delete Incident",
    responses={404: {"model": ErrorEnvelope, "description": "Incident not found"}},
)
def delete_incident(
    incident_id: str,
    store: IncidentStore = Depends(get_incident_store),
) -> MessageEnvelope:
    store.delete(incident_id)
    return MessageEnvelope(message="Incident deleted successfully")


@router.patch(
    "/{incident_id}/close",
    response_model=IncidentMessageEnvelope,
    summary="Close Incident",
    description="Set status to closed and stamp the end date with the current time.",
    responses={404: {"model": ErrorEnvelope, "description": "Incident not found"}},
)
def close_incident(
    incident_id: str,
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentMessageEnvelope:
    incident = store.close(incident_id)
    return IncidentMessageEnvelope(
        message="Incident closed successfully",
        data=IncidentResponse.from_incident(incident),
    )
