"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.base import Base, Project, Stop, Route, Trip, RouteStop, Shape
from app.db.session import get_db
from app.main import app
from app.repositories.transit import TransitRepository

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# stop_id -> (lat, lon). S1-S2 are ~111m apart, S3-S4 ~56m, S2-S3 ~1km.
STOP_COORDINATES = {
    "S1": (40.0000, -3.0000),
    "S2": (40.0010, -3.0000),
    "S3": (40.0100, -3.0000),
    "S4": (40.0105, -3.0000),
}


async def seed_network(session: AsyncSession) -> dict:
    """
    Two projects. Project one holds route R1 served in both directions over
    S1-S4, an empty route R2, and shape SH1. Project two reuses the stop ids
    S1/S2 at the same coordinates.
    """
    main = Project(name="Main network")
    other = Project(name="Other network")
    session.add_all([main, other])
    await session.flush()

    for stop_id, (lat, lon) in STOP_COORDINATES.items():
        session.add(Stop(project_id=main.id, stop_id=stop_id, stop_name=f"Stop {stop_id}", stop_lat=lat, stop_lon=lon))
    for stop_id in ("S1", "S2"):
        lat, lon = STOP_COORDINATES[stop_id]
        session.add(Stop(project_id=other.id, stop_id=stop_id, stop_name=f"Other {stop_id}", stop_lat=lat, stop_lon=lon))

    session.add_all([
        Route(project_id=main.id, route_id="R1", route_short_name="1", route_type=3),
        Route(project_id=main.id, route_id="R2", route_short_name="2", route_type=3),
        Route(project_id=other.id, route_id="R1", route_short_name="1", route_type=3),
    ])
    await session.flush()

    for sequence, stop_id in enumerate(["S1", "S2", "S3", "S4"]):
        session.add(RouteStop(project_id=main.id, route_id="R1", direction_id=0, stop_sequence=sequence, stop_id=stop_id))
    for sequence, stop_id in enumerate(["S4", "S3", "S2", "S1"]):
        session.add(RouteStop(project_id=main.id, route_id="R1", direction_id=1, stop_sequence=sequence, stop_id=stop_id))

    session.add_all([
        Trip(project_id=main.id, trip_id="T1", route_id="R1", service_id="WK", direction_id=0, shape_id="SH1", trip_headsign="Northbound"),
        Trip(project_id=main.id, trip_id="T3", route_id="R1", service_id="WK", direction_id=0, shape_id="SH2"),
        Trip(project_id=main.id, trip_id="T2", route_id="R1", service_id="WK", direction_id=1, trip_headsign="Southbound"),
        Trip(project_id=main.id, trip_id="T9", route_id="R2", service_id="WK", direction_id=0),
        Trip(project_id=other.id, trip_id="T1", route_id="R1", service_id="WK", direction_id=0, shape_id="SH1"),
    ])

    for sequence, (lat, lon) in enumerate([(40.0000, -3.0000), (40.0050, -3.0001), (40.0105, -3.0000)]):
        session.add(Shape(
            project_id=main.id,
            shape_id="SH1",
            shape_pt_sequence=sequence,
            shape_pt_lat=lat,
            shape_pt_lon=lon,
            shape_dist_traveled=sequence * 580.0,
        ))

    await session.commit()
    return {"project_id": main.id, "other_project_id": other.id}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def network(db):
    """Seeded projects; returns their ids"""
    return await seed_network(db)


@pytest.fixture
def project_id(network):
    return network["project_id"]


@pytest.fixture
def repo(db, project_id):
    return TransitRepository(db, project_id)


@pytest.fixture
def other_repo(db, network):
    return TransitRepository(db, network["other_project_id"])


@pytest_asyncio.fixture
async def client(session_factory, network):
    """HTTP client for the FastAPI app, backed by the seeded test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_base_url(project_id):
    """Base URL for the project's endpoints."""
    return f"/api/v1/projects/{project_id}"
