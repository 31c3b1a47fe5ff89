"""Project model - the tenant boundary for all transit data"""

from typing import List
from sqlalchemy import String, Text, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base, TimestampMixin


class Project(Base, TimestampMixin):
    """Project - one transit network dataset. Every GTFS row belongs to exactly one project."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Descriptive name for this project")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, comment="Whether this project is currently active"
    )

    # GTFS data relationships
    agencies: Mapped[List["Agency"]] = relationship(
        "Agency", back_populates="project", cascade="all, delete-orphan"
    )
    stops: Mapped[List["Stop"]] = relationship(
        "Stop", back_populates="project", cascade="all, delete-orphan"
    )
    routes: Mapped[List["Route"]] = relationship(
        "Route", back_populates="project", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Project {self.name}>"
