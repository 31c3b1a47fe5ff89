import pytest

from app.core.exceptions import NotFoundError
from app.services.route_path_service import RoutePathService


async def add_stop_times(repo, trip_id, rows):
    await repo.stop_times.bulk_insert([
        {
            "trip_id": trip_id,
            "stop_sequence": seq,
            "stop_id": stop_id,
            "arrival_time": f"08:{seq:02d}:00",
            "departure_time": f"08:{seq:02d}:00",
            "shape_dist_traveled": dist,
        }
        for seq, stop_id, dist in rows
    ])
    await repo.commit()


async def test_unknown_route_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        await RoutePathService(repo).get_route_path("NOPE", 0)


async def test_direction_without_shaped_trip_returns_none(repo):
    assert await RoutePathService(repo).get_route_path("R1", 1) is None


async def test_route_without_trips_returns_none(repo):
    assert await RoutePathService(repo).get_route_path("R2", 0) is None


async def test_representative_trip_is_lowest_trip_id(repo):
    await add_stop_times(repo, "T1", [(0, "S1", None), (1, "S2", None)])

    path = await RoutePathService(repo).get_route_path("R1", 0)

    assert path.trip_id == "T1"
    assert path.shape_id == "SH1"
    assert path.direction_id == 0
    assert [p.sequence for p in path.polyline] == [0, 1, 2]
    assert path.polyline[0].lat == pytest.approx(40.0)


async def test_stops_ordered_by_distance_when_every_row_has_one(repo):
    await add_stop_times(repo, "T1", [
        (0, "S1", 0.0),
        (1, "S3", 1100.0),
        (2, "S2", 110.0),
        (3, "S4", 1160.0),
    ])

    path = await RoutePathService(repo).get_route_path("R1", 0)

    assert [s.stop_id for s in path.stops] == ["S1", "S2", "S3", "S4"]


async def test_missing_distance_falls_back_to_sequence(repo):
    await add_stop_times(repo, "T1", [
        (0, "S1", 0.0),
        (1, "S3", 1100.0),
        (2, "S2", None),
        (3, "S4", 1160.0),
    ])

    path = await RoutePathService(repo).get_route_path("R1", 0)

    assert [s.stop_id for s in path.stops] == ["S1", "S3", "S2", "S4"]


async def test_all_zero_distances_fall_back_to_sequence(repo):
    await add_stop_times(repo, "T1", [(0, "S2", 0.0), (1, "S1", 0.0), (2, "S3", 0.0)])

    path = await RoutePathService(repo).get_route_path("R1", 0)

    assert [s.stop_id for s in path.stops] == ["S2", "S1", "S3"]


async def test_each_stop_drawn_once(repo):
    await add_stop_times(repo, "T1", [
        (0, "S1", None),
        (1, "S2", None),
        (2, "S3", None),
        (3, "S2", None),
        (4, "S1", None),
    ])

    path = await RoutePathService(repo).get_route_path("R1", 0)

    assert [(s.stop_id, s.stop_sequence) for s in path.stops] == [("S1", 0), ("S2", 1), ("S3", 2)]
    assert path.stops[0].stop_name == "Stop S1"
    assert path.stops[0].stop_lat == pytest.approx(40.0)


async def test_route_directions(repo):
    await add_stop_times(repo, "T2", [(0, "S4", None), (1, "S3", None)])

    directions = await RoutePathService(repo).get_route_directions("R1")

    assert directions.available_directions == [0, 1]
    assert directions.directions["0"].trip_id == "T1"
    assert directions.directions["1"].trip_headsign == "Southbound"
    assert [s.stop_id for s in directions.directions["1"].stops] == ["S4", "S3"]


async def test_route_directions_fold_missing_direction_into_zero(repo):
    await repo.trips.add(trip_id="T0", route_id="R1", service_id="WK", direction_id=None)
    await repo.commit()

    directions = await RoutePathService(repo).get_route_directions("R1")

    assert directions.available_directions == [0, 1]
    assert set(directions.directions) == {"0", "1"}
    assert directions.directions["0"].trip_id == "T0"
    assert directions.directions["0"].direction_id == 0


async def test_paths_are_project_scoped(other_repo):
    path = await RoutePathService(other_repo).get_route_path("R1", 0)

    # Project two's T1 points at SH1, which only exists in project one
    assert path.trip_id == "T1"
    assert path.polyline == []
    assert path.stops == []
