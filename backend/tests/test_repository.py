from sqlalchemy.sql.dml import Insert

from app.models.gtfs import Stop, Trip
from app.repositories.transit import TransitRepository


async def test_for_unknown_project_returns_none(db, network):
    assert await TransitRepository.for_project(db, 999) is None
    assert await TransitRepository.for_project(db, network["project_id"]) is not None


async def test_queries_carry_the_project(repo, other_repo):
    assert await repo.stops.count() == 4
    assert await other_repo.stops.count() == 2

    stop = await other_repo.stops.get(stop_id="S1")
    assert stop.stop_name == "Other S1"


async def test_find_first_and_many_ordering(repo):
    first = await repo.trips.find_first(route_id="R1", order_by=[Trip.trip_id])
    assert first.trip_id == "T1"

    stops = await repo.stops.find_many(Stop.stop_id.in_(["S4", "S2"]), order_by=[Stop.stop_id])
    assert [s.stop_id for s in stops] == ["S2", "S4"]


async def test_bulk_insert_forces_project(repo, other_repo):
    await other_repo.shapes.bulk_insert([
        {"project_id": repo.project_id, "shape_id": "X", "shape_pt_sequence": 0, "shape_pt_lat": 1.0, "shape_pt_lon": 1.0},
    ])
    await other_repo.commit()

    assert await other_repo.shapes.count(shape_id="X") == 1
    assert await repo.shapes.count(shape_id="X") == 0


async def test_delete_many_is_scoped(repo, other_repo):
    assert await other_repo.stops.delete_many(stop_id="S1") == 1
    await other_repo.commit()
    assert await repo.stops.get(stop_id="S1") is not None


async def test_insert_ignoring_conflicts_in_chunks(repo, monkeypatch):
    await repo.transfers.add(from_stop_id="S1", to_stop_id="S2", transfer_type=0)
    await repo.commit()

    inserts = []
    execute = repo.db.execute

    async def counting_execute(statement, *args, **kwargs):
        if isinstance(statement, Insert):
            inserts.append(statement)
        return await execute(statement, *args, **kwargs)

    monkeypatch.setattr(repo.db, "execute", counting_execute)

    rows = [
        {"from_stop_id": from_stop, "to_stop_id": to_stop, "transfer_type": 0}
        for from_stop, to_stop in [("S1", "S2"), ("S2", "S1"), ("S1", "S3"), ("S3", "S1"), ("S3", "S4")]
    ]
    submitted = await repo.transfers.insert_ignoring_conflicts(
        rows, ["project_id", "from_stop_id", "to_stop_id"], chunk_size=2
    )
    await repo.commit()

    assert submitted == 5
    assert len(inserts) == 3
    assert await repo.transfers.count() == 5
