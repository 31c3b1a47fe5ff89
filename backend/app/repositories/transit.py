"""Project-scoped data access for GTFS entities.

Every statement issued through these repositories carries the
``project_id`` predicate; services never build unscoped queries.
"""

import logging
from typing import Any, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select, func, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.gtfs import (
    Stop,
    Route,
    Trip,
    RouteStop,
    StopTime,
    Shape,
    Frequency,
    Transfer,
)
from app.models.project import Project

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class ProjectScopedRepository(Generic[ModelT]):
    """Generic repository for one GTFS model within one project"""

    def __init__(self, db: AsyncSession, model: Type[ModelT], project_id: int):
        self.db = db
        self.model = model
        self.project_id = project_id

    def _where(self, criteria: Iterable[Any], filters: dict[str, Any]) -> list:
        clauses = [self.model.project_id == self.project_id]
        clauses.extend(criteria)
        for field, value in filters.items():
            clauses.append(getattr(self.model, field) == value)
        return clauses

    def select(self, *criteria, **filters):
        """Scoped SELECT statement, for callers that need joins or custom shaping"""
        return select(self.model).where(*self._where(criteria, filters))

    async def get(self, **filters) -> Optional[ModelT]:
        """Find a single row by its natural key"""
        result = await self.db.execute(self.select(**filters))
        return result.scalar_one_or_none()

    async def find_first(
        self, *criteria, order_by: Sequence[Any] = (), **filters
    ) -> Optional[ModelT]:
        query = self.select(*criteria, **filters).order_by(*order_by).limit(1)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def find_many(
        self, *criteria, order_by: Sequence[Any] = (), **filters
    ) -> List[ModelT]:
        query = self.select(*criteria, **filters).order_by(*order_by)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self, *criteria, **filters) -> int:
        query = select(func.count()).select_from(self.model).where(*self._where(criteria, filters))
        return await self.db.scalar(query) or 0

    async def delete_many(self, *criteria, **filters) -> int:
        result = await self.db.execute(
            delete(self.model).where(*self._where(criteria, filters))
        )
        return result.rowcount or 0

    async def bulk_insert(self, rows: Sequence[dict[str, Any]]) -> List[ModelT]:
        """Insert rows (project_id is forced to this repository's project) and flush"""
        instances = [self.model(**{**row, "project_id": self.project_id}) for row in rows]
        self.db.add_all(instances)
        await self.db.flush()
        return instances

    async def add(self, **values) -> ModelT:
        instances = await self.bulk_insert([values])
        return instances[0]

    async def insert_ignoring_conflicts(
        self,
        rows: Sequence[dict[str, Any]],
        index_elements: Sequence[str],
        chunk_size: Optional[int] = None,
    ) -> int:
        """INSERT ... ON CONFLICT DO NOTHING against a unique constraint.

        Rows go out in statements of at most ``chunk_size`` rows (default
        BULK_INSERT_CHUNK_SIZE) on the caller's transaction, keeping each
        statement under the driver's bind parameter limit. Returns the number
        of rows submitted; rows that collide with an existing key are silently
        skipped by the database.
        """
        if not rows:
            return 0

        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            insert_fn = postgresql.insert
        elif dialect == "sqlite":
            insert_fn = sqlite.insert
        else:
            raise NotImplementedError(f"Conflict-ignoring insert not supported on {dialect}")

        chunk_size = chunk_size or settings.BULK_INSERT_CHUNK_SIZE
        values = [{**row, "project_id": self.project_id} for row in rows]

        for start in range(0, len(values), chunk_size):
            statement = insert_fn(self.model).values(values[start:start + chunk_size]).on_conflict_do_nothing(
                index_elements=list(index_elements)
            )
            await self.db.execute(statement)

        logger.debug(
            f"Inserted {len(values)} {self.model.__tablename__} rows in chunks of {chunk_size} "
            f"(project {self.project_id})"
        )
        return len(values)


class TransitRepository:
    """Unit of work over one project: per-entity repositories sharing one session"""

    def __init__(self, db: AsyncSession, project_id: int):
        self.db = db
        self.project_id = project_id

        self.stops = ProjectScopedRepository(db, Stop, project_id)
        self.routes = ProjectScopedRepository(db, Route, project_id)
        self.trips = ProjectScopedRepository(db, Trip, project_id)
        self.route_stops = ProjectScopedRepository(db, RouteStop, project_id)
        self.stop_times = ProjectScopedRepository(db, StopTime, project_id)
        self.shapes = ProjectScopedRepository(db, Shape, project_id)
        self.frequencies = ProjectScopedRepository(db, Frequency, project_id)
        self.transfers = ProjectScopedRepository(db, Transfer, project_id)

    @classmethod
    async def for_project(cls, db: AsyncSession, project_id: int) -> Optional["TransitRepository"]:
        """Build a repository for an existing project, or None when the project is unknown"""
        project = await db.get(Project, project_id)
        if project is None:
            return None
        return cls(db, project_id)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
