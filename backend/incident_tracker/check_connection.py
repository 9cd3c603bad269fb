"""
Connection Check
================

End-to-end smoke test of the incident store against the configured
database:

1. connect
2. create a sample incident and report its duration
3. list all and open incidents
4. update the sample's remarks
5. confirm validation rejects a bad payload with every violation
6. delete the sample (unless --keep)

Usage:
    python -m incident_tracker.check_connection
    python -m incident_tracker.check_connection --keep

Exits non-zero if any step fails.
"""

import argparse
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from incident_tracker.core.config import get_settings
from incident_tracker.core.exceptions import IncidentTrackerException, ValidationError
from incident_tracker.core.logging import configure_logging, get_logger
from incident_tracker.db.session import Database
from incident_tracker.services.incident_store import IncidentStore, duration_in_days

logger = get_logger(__name__)

SAMPLE_INCIDENT = {
    "type": "Network Outage",
    "incidentStartDate": "2024-01-15T10:00:00Z",
    "incidentEndDate": "2024-01-15T12:30:00Z",
    "description": (
        "Major network outage affecting all users in the main office building. "
        "Connectivity was completely lost for approximately 2.5 hours."
    ),
    "remarks": "Root cause identified as faulty network switch. Replacement scheduled for maintenance window.",
    "status": "closed",
}

INVALID_INCIDENT = {
    "type": "",
    "incidentStartDate": "2024-01-15T10:00:00Z",
    "description": "Too short",
}


def run_checks(database: Database, keep: bool = False) -> dict:
    """
    Exercise every store operation once.

    Returns:
        Summary of what was observed

    Raises:
        ConnectivityError: if the database is unreachable
        RuntimeError: if validation accepted the invalid payload
    """
    database.connect()
    database.create_schema()

    db = database.session()
    try:
        store = IncidentStore(db)

        incident = store.create(SAMPLE_INCIDENT)
        logger.info(
            "sample_incident_created",
            incident_id=str(incident.id),
            type=incident.type,
            status=incident.status.value,
            duration_in_days=duration_in_days(incident.incident_start_date, incident.incident_end_date),
        )

        total = len(store.find_all())
        open_count = len(store.find_open())
        logger.info("incidents_queried", total=total, open=open_count)

        updated = store.update(incident.id, {"remarks": "Updated remarks after investigation completion"})
        logger.info("sample_incident_updated", remarks=updated.remarks)

        try:
            store.create(INVALID_INCIDENT)
        except ValidationError as e:
            validation_errors = e.errors
            logger.info("validation_rejected_invalid_incident", errors=validation_errors)
        else:
            raise RuntimeError("Validation accepted an invalid incident")

        if not keep:
            store.delete(incident.id)
            logger.info("sample_incident_deleted", incident_id=str(incident.id))

        return {
            "incident_id": str(incident.id),
            "total": total,
            "open": open_count,
            "validation_errors": validation_errors,
        }
    finally:
        db.close()


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Check the incident store end to end")
    parser.add_argument(
        "--keep",
        action="store_true",
        help="Leave the sample incident in the database",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)
    database = Database.from_settings(settings)

    try:
        summary = run_checks(database, keep=args.keep)
    except (IncidentTrackerException, SQLAlchemyError, RuntimeError) as e:
        logger.error(
            "connection_check_failed",
            error=str(e),
            error_type=type(e).__name__,
            details=getattr(e, "details", None),
        )
        return 1
    finally:
        database.dispose()

    logger.info("connection_check_passed", **summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
