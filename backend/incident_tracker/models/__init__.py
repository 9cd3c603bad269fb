"""
Model Package Initialization
============================

All SQLAlchemy ORM models are exported from this module.

Usage:
    from incident_tracker.models import Incident
"""

from .incident import Incident

__all__ = [
    "Incident",
]
