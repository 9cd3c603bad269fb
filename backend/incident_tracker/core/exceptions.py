"""
Centralized Exception Handling Module
=====================================

Defines the exception taxonomy for the incident tracker.

Every exception carries the HTTP status code it maps to, so the
application-level handlers in `incident_tracker.main` can turn it
into a response envelope without inspecting the type further.

Usage:
    raise IncidentNotFoundError(incident_id)
    raise ValidationError(["Incident type is required"])
"""

from typing import Any, Dict, List, Optional

from fastapi import status


class IncidentTrackerException(Exception):
    """
    Base exception class for the application.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(IncidentTrackerException):
    """
    Raised when one or more field constraints are violated.

    Always carries the full list of violations, never just the first.
    """

    def __init__(
        self,
        errors: List[str],
        message: str = "Validation error",
    ):
        self.errors = list(errors)
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": self.errors},
        )


class InvalidIdentifierError(IncidentTrackerException):
    """Raised when a record id is not a well-formed identifier."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        self.errors = [f"'{identifier}' is not a valid {resource.lower()} id"]
        super().__init__(
            message=f"Invalid {resource.lower()} id",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"resource": resource, "identifier": identifier},
        )


# ==========================
# Resource Exceptions
# ==========================

class NotFoundError(IncidentTrackerException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        message = f"{resource} not found"
        details = {"resource": resource}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class IncidentNotFoundError(NotFoundError):
    """Raised when an incident is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Incident", identifier=identifier)


# ==========================
# Infrastructure Exceptions
# ==========================

class ConnectivityError(IncidentTrackerException):
    """
    Raised when the database cannot be reached.

    Fatal during startup; surfaces as a 500 at request time.
    """

    def __init__(self, reason: str = "Database unavailable"):
        super().__init__(
            message="Server error",
            details={"reason": reason},
        )
