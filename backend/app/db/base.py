"""Import all models for Alembic autogenerate"""

from app.db.base_class import Base

# Import all models so Alembic can detect them
from app.models.project import Project
from app.models.gtfs import (
    Agency,
    Stop,
    Route,
    Trip,
    RouteStop,
    StopTime,
    Shape,
    Frequency,
    Transfer,
)
from app.models.audit import AuditLog

__all__ = [
    "Base",
    "Project",
    "Agency",
    "Stop",
    "Route",
    "Trip",
    "RouteStop",
    "StopTime",
    "Shape",
    "Frequency",
    "Transfer",
    "AuditLog",
]
