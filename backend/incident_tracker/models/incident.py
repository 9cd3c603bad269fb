"""
Incident Model
==============

A tracked operational event with an open -> closed lifecycle.

Database Indexes:
- Primary key: id (UUID)
- Index: created_at (newest-first listing)
- Index: status (open incident queries)
"""

import uuid
from datetime import datetime, UTC
from typing import Optional

from sqlalchemy import Enum, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from incident_tracker.core.enums import IncidentStatus
from incident_tracker.db.base import Base
from incident_tracker.db.types import UTCDateTime


def utcnow() -> datetime:
    return datetime.now(UTC)


class Incident(Base):
    """
    Incident entity.

    Attributes:
        id: UUID primary key, generated on creation
        type: Short category of the incident (e.g. "Network Outage")
        incident_start_date: When the incident began
        incident_end_date: When the incident ended, if it has
        description: Free-text description, at least 10 characters
        remarks: Optional follow-up notes
        status: open or closed
        created_at: Creation timestamp, immutable
        updated_at: Refreshed on every mutation
    """

    __tablename__ = "incidents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    type: Mapped[str] = mapped_column(Text, nullable=False)
    incident_start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    incident_end_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[IncidentStatus] = mapped_column(
        Enum(
            IncidentStatus,
            name="incident_status",
            native_enum=False,
            length=16,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=IncidentStatus.OPEN,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    def to_document(self) -> dict:
        """Return the user-editable fields as a plain dict keyed by attribute name."""
        return {
            "type": self.type,
            "incident_start_date": self.incident_start_date,
            "incident_end_date": self.incident_end_date,
            "description": self.description,
            "remarks": self.remarks,
            "status": self.status,
        }

    def __repr__(self) -> str:
        return f"<Incident(id={self.id}, type={self.type!r}, status={self.status})>"
