"""
Incident Store
==============

Query and mutation operations for incidents.

Every mutation validates the full resulting document before anything is
written, refreshes `updated_at`, and commits a single row. Lookups by id
distinguish a malformed id (`InvalidIdentifierError`) from a missing
record (`IncidentNotFoundError`).

Usage:
    store = IncidentStore(db)
    incident = store.create({"type": "Network Outage", ...})
    store.close(incident.id)
"""

import math
import uuid
from datetime import datetime, timedelta, UTC
from typing import Any, Callable, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from incident_tracker.core.enums import IncidentStatus
from incident_tracker.core.exceptions import (
    IncidentNotFoundError,
    InvalidIdentifierError,
    ValidationError,
)
from incident_tracker.core.logging import get_logger
from incident_tracker.models.incident import Incident, utcnow
from incident_tracker.services.validation import document_from_payload, validate_incident

# Initialize logger
logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def duration_in_days(
    start: Optional[datetime],
    end: Optional[datetime],
    now: Optional[datetime] = None,
) -> int:
    """
    Whole days an incident has lasted, rounded up.

    An open-ended incident is measured up to ``now``.

    Returns:
        ceil(|end - start| / 1 day), or 0 when there is no start date
    """
    if start is None:
        return 0
    effective_end = end or now or datetime.now(UTC)
    elapsed = abs((effective_end - start).total_seconds())
    return math.ceil(elapsed / SECONDS_PER_DAY)


class IncidentStore:
    """
    Incident persistence operations bound to one database session.

    Args:
        db: SQLAlchemy session
        clock: Source of the current time, injectable for tests
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    # --------------------------
    # Queries
    # --------------------------

    def find_all(self) -> List[Incident]:
        """All incidents, newest first."""
        stmt = select(Incident).order_by(Incident.created_at.desc())
        return list(self.db.scalars(stmt))

    def find_open(self) -> List[Incident]:
        """Open incidents, newest first."""
        stmt = (
            select(Incident)
            .where(Incident.status == IncidentStatus.OPEN)
            .order_by(Incident.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def find_by_id(self, incident_id: Any) -> Incident:
        """
        Fetch one incident.

        Raises:
            InvalidIdentifierError: if the id is malformed
            IncidentNotFoundError: if no incident has that id
        """
        key = self._parse_id(incident_id)
        incident = self.db.get(Incident, key)
        if incident is None:
            raise IncidentNotFoundError(str(incident_id))
        return incident

    # --------------------------
    # Mutations
    # --------------------------

    def create(self, fields: Mapping[str, Any]) -> Incident:
        """
        Validate and persist a new incident.

        Raises:
            ValidationError: listing every violated constraint
        """
        now = self.clock()
        document = self._validate(document_from_payload(fields), now)

        incident = Incident(
            id=uuid.uuid4(),
            created_at=now,
            updated_at=now,
            **document,
        )
        self.db.add(incident)
        self._commit()

        logger.info("incident_created", incident_id=str(incident.id), status=incident.status.value)
        return incident

    def update(self, incident_id: Any, fields: Mapping[str, Any]) -> Incident:
        """
        Merge ``fields`` into an existing incident.

        The merged document is validated as a whole.

        Raises:
            InvalidIdentifierError, IncidentNotFoundError, ValidationError
        """
        incident = self.find_by_id(incident_id)
        now = self.clock()

        merged = incident.to_document()
        merged.update(document_from_payload(fields))
        document = self._validate(merged, now)

        self._apply(incident, document, now)
        self._commit()

        logger.info("incident_updated", incident_id=str(incident.id), fields=sorted(document_from_payload(fields)))
        return incident

    def close(self, incident_id: Any) -> Incident:
        """
        Mark an incident closed and stamp its end date with the current time.

        Raises:
            InvalidIdentifierError, IncidentNotFoundError, ValidationError
        """
        incident = self.find_by_id(incident_id)
        now = self.clock()

        merged = incident.to_document()
        merged["status"] = IncidentStatus.CLOSED
        merged["incident_end_date"] = now
        document = self._validate(merged, now)

        self._apply(incident, document, now)
        self._commit()

        logger.info("incident_closed", incident_id=str(incident.id))
        return incident

    def delete(self, incident_id: Any) -> None:
        """
        Permanently remove an incident.

        Raises:
            InvalidIdentifierError, IncidentNotFoundError
        """
        incident = self.find_by_id(incident_id)
        self.db.delete(incident)
        self._commit()

        logger.info("incident_deleted", incident_id=str(incident_id))

    # --------------------------
    # Helpers
    # --------------------------

    @staticmethod
    def _parse_id(incident_id: Any) -> uuid.UUID:
        if isinstance(incident_id, uuid.UUID):
            return incident_id
        try:
            return uuid.UUID(str(incident_id))
        except ValueError:
            raise InvalidIdentifierError("Incident", str(incident_id)) from None

    @staticmethod
    def _validate(document: Mapping[str, Any], now: datetime) -> dict:
        result = validate_incident(document, now=now)
        if not result.is_valid:
            logger.warning("incident_validation_failed", errors=result.errors)
            raise ValidationError(result.errors)
        return result.document

    @staticmethod
    def _apply(incident: Incident, document: Mapping[str, Any], now: datetime) -> None:
        for name, value in document.items():
            setattr(incident, name, value)
        # updated_at must strictly increase even if the clock has not moved
        previous = incident.updated_at
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        incident.updated_at = now

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
