"""
Incident Validation
===================

Field validation for incident documents, independent of storage.

`validate_incident` runs on every create and on the full merged document
of every update, so a partial update can never bypass the checks on
fields it did not touch.

Algorithm:
    1. required-field presence (blank strings count as missing)
    2. trim text fields
    3. type-specific checks: timestamp parsing, description length,
       status membership, end date ordering
    4. collect every violation before reporting
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Dict, List, Mapping, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from incident_tracker.core.enums import IncidentStatus

MIN_DESCRIPTION_LENGTH = 10

# Wire (camelCase) name -> model attribute name
FIELD_ALIASES: Dict[str, str] = {
    "type": "type",
    "incidentStartDate": "incident_start_date",
    "incidentEndDate": "incident_end_date",
    "description": "description",
    "remarks": "remarks",
    "status": "status",
}

EDITABLE_FIELDS = frozenset(FIELD_ALIASES.values())

_timestamp_adapter = TypeAdapter(datetime)


@dataclass
class ValidationResult:
    """Cleaned document plus every violated constraint."""

    document: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def document_from_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Extract the editable fields from a request payload.

    Accepts wire names (``incidentStartDate``) and attribute names
    (``incident_start_date``). Unknown keys, ``id`` and the audit
    timestamps are dropped.
    """
    document: Dict[str, Any] = {}
    for key, value in payload.items():
        if key in FIELD_ALIASES:
            document[FIELD_ALIASES[key]] = value
        elif key in EDITABLE_FIELDS:
            document[key] = value
    return document


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp into an aware UTC datetime.

    Naive values are taken to be UTC.

    Raises:
        ValueError: if the value is not a recognizable timestamp
    """
    try:
        parsed = _timestamp_adapter.validate_python(value)
    except PydanticValidationError as e:
        raise ValueError(str(e)) from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError as e:
        # offset pushes the instant past year 1 or 9999
        raise ValueError(str(e)) from e


def _clean_text(value: Any, label: str, errors: List[str], required: bool = False) -> Optional[str]:
    if value is None:
        if required:
            errors.append(f"{label} is required")
        return None
    if not isinstance(value, str):
        errors.append(f"{label} must be a string")
        return None
    value = value.strip()
    if required and not value:
        errors.append(f"{label} is required")
    return value


def _clean_timestamp(value: Any, label: str, errors: List[str], required: bool = False) -> Optional[datetime]:
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            errors.append(f"{label} is required")
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        errors.append(f"{label} must be a valid date")
        return None


def _clean_status(value: Any, errors: List[str]) -> Optional[IncidentStatus]:
    if value is None:
        return IncidentStatus.OPEN
    try:
        return IncidentStatus(value)
    except ValueError:
        errors.append('Status must be either "open" or "closed"')
        return None


def validate_incident(document: Mapping[str, Any], now: Optional[datetime] = None) -> ValidationResult:
    """
    Validate a full incident document keyed by attribute name.

    A document whose status is closed but has no end date gets the end
    date stamped with ``now`` before the ordering check runs.

    Args:
        document: Editable incident fields
        now: Current time, injectable for tests

    Returns:
        ValidationResult with the cleaned document and all violations
    """
    errors: List[str] = []

    incident_type = _clean_text(document.get("type"), "Incident type", errors, required=True)
    start = _clean_timestamp(document.get("incident_start_date"), "Incident start date", errors, required=True)
    error_count = len(errors)
    end = _clean_timestamp(document.get("incident_end_date"), "Incident end date", errors)
    end_is_invalid = len(errors) > error_count

    description = _clean_text(document.get("description"), "Description", errors, required=True)
    if description and len(description) < MIN_DESCRIPTION_LENGTH:
        errors.append(f"Description should be at least {MIN_DESCRIPTION_LENGTH} characters long")

    remarks = _clean_text(document.get("remarks"), "Remarks", errors)
    status = _clean_status(document.get("status"), errors)

    if status is IncidentStatus.CLOSED and end is None and not end_is_invalid:
        end = now or datetime.now(UTC)

    if start is not None and end is not None and end < start:
        errors.append("Incident end date must be after start date")

    return ValidationResult(
        document={
            "type": incident_type,
            "incident_start_date": start,
            "incident_end_date": end,
            "description": description,
            "remarks": remarks,
            "status": status,
        },
        errors=errors,
    )
