"""
Enumeration Module
==================

Defines enumerations used across the application.
"""

from enum import Enum


class IncidentStatus(str, Enum):
    """Lifecycle statuses for incidents."""

    OPEN = "open"
    CLOSED = "closed"
