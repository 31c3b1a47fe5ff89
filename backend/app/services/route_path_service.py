"""
Route path composition.

Builds the drawable path of a route direction from a representative trip:
its shape polyline plus the stops it visits, each stop drawn once.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import and_, func, or_, select

from app.core.exceptions import NotFoundError
from app.models.gtfs import Route, Trip, StopTime, Stop, Shape
from app.models.keys import StopKey
from app.repositories.transit import TransitRepository
from app.schemas.route_path import (
    PathPoint,
    PathStop,
    RoutePath,
    DirectionStops,
    RouteDirections,
)

logger = logging.getLogger(__name__)


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def order_by_distance_traveled(stop_times: Sequence[StopTime]) -> List[StopTime]:
    """
    Order a trip's stop times for drawing.

    Distance ordering is used only when every row carries shape_dist_traveled
    and at least one distance is positive; otherwise stop_sequence order is
    kept. Ties on distance fall back to stop_sequence.
    """
    by_sequence = sorted(stop_times, key=lambda st: st.stop_sequence)
    distances = [st.shape_dist_traveled for st in by_sequence]

    if not distances or any(d is None for d in distances) or not any(d > 0 for d in distances):
        return by_sequence

    return sorted(by_sequence, key=lambda st: (st.shape_dist_traveled, st.stop_sequence))


def unique_stops_first_visit(rows: Sequence[Tuple[StopTime, Optional[Stop]]]) -> List[PathStop]:
    """One marker per stop, keeping the first occurrence in the given order"""
    seen: set[StopKey] = set()
    markers: List[PathStop] = []
    for stop_time, stop in rows:
        key = StopKey(stop_time.project_id, stop_time.stop_id)
        if key in seen:
            continue
        seen.add(key)
        markers.append(_path_stop(stop_time, stop))
    return markers


def _path_stop(stop_time: StopTime, stop: Optional[Stop]) -> PathStop:
    return PathStop(
        stop_id=stop_time.stop_id,
        stop_name=stop.stop_name if stop else None,
        stop_lat=_as_float(stop.stop_lat) if stop else None,
        stop_lon=_as_float(stop.stop_lon) if stop else None,
        stop_sequence=stop_time.stop_sequence,
        arrival_time=stop_time.arrival_time,
        departure_time=stop_time.departure_time,
        shape_dist_traveled=_as_float(stop_time.shape_dist_traveled),
    )


def _direction_filter(direction_id: int):
    # Trips without a direction count as outbound (0)
    if direction_id == 0:
        return or_(Trip.direction_id == 0, Trip.direction_id.is_(None))
    return Trip.direction_id == direction_id


class RoutePathService:
    """Composes route paths and per-direction stop lists for one project"""

    def __init__(self, repo: TransitRepository):
        self.repo = repo

    async def _get_route(self, route_id: str) -> Route:
        route = await self.repo.routes.get(route_id=route_id)
        if not route:
            raise NotFoundError(f"Route '{route_id}' not found in this project")
        return route

    async def _stop_times_with_stops(self, trip_id: str) -> List[Tuple[StopTime, Optional[Stop]]]:
        query = (
            self.repo.stop_times.select(trip_id=trip_id)
            .outerjoin(Stop, and_(
                StopTime.project_id == Stop.project_id,
                StopTime.stop_id == Stop.stop_id,
            ))
            .add_columns(Stop)
            .order_by(StopTime.stop_sequence)
        )
        result = await self.repo.db.execute(query)
        return [(stop_time, stop) for stop_time, stop in result.all()]

    async def get_route_path(self, route_id: str, direction_id: int = 0) -> Optional[RoutePath]:
        """
        Compose the path of a route direction.

        Returns None when no trip of the route direction has a shape yet; this
        is the "not drawn yet" state, distinct from an unknown route, which
        raises NotFoundError.
        """
        await self._get_route(route_id)

        trip = await self.repo.trips.find_first(
            _direction_filter(direction_id),
            Trip.shape_id.is_not(None),
            Trip.shape_id != "",
            route_id=route_id,
            order_by=[Trip.trip_id],
        )
        if trip is None:
            logger.info(
                f"No shaped trip for route {route_id} direction {direction_id} "
                f"in project {self.repo.project_id}"
            )
            return None

        rows = await self._stop_times_with_stops(trip.trip_id)
        stops_by_key = {st.stop_sequence: stop for st, stop in rows}
        ordered = order_by_distance_traveled([st for st, _ in rows])
        ordered_rows = [(st, stops_by_key[st.stop_sequence]) for st in ordered]

        shape_points = await self.repo.shapes.find_many(
            shape_id=trip.shape_id,
            order_by=[Shape.shape_pt_sequence],
        )
        polyline = [
            PathPoint(
                lat=float(point.shape_pt_lat),
                lon=float(point.shape_pt_lon),
                sequence=point.shape_pt_sequence,
                dist_traveled=_as_float(point.shape_dist_traveled),
            )
            for point in shape_points
        ]

        return RoutePath(
            route_id=route_id,
            direction_id=direction_id,
            trip_id=trip.trip_id,
            shape_id=trip.shape_id,
            polyline=polyline,
            stops=unique_stops_first_visit(ordered_rows),
        )

    async def get_route_directions(self, route_id: str) -> RouteDirections:
        """Stops of a representative trip for every direction the route has trips in"""
        await self._get_route(route_id)

        # NULL directions fold into 0
        folded_direction = func.coalesce(Trip.direction_id, 0)
        query = (
            select(folded_direction)
            .where(Trip.project_id == self.repo.project_id, Trip.route_id == route_id)
            .distinct()
            .order_by(folded_direction)
        )
        result = await self.repo.db.execute(query)
        available_directions = list(result.scalars().all())

        directions = {}
        for direction in available_directions:
            trip = await self.repo.trips.find_first(
                _direction_filter(direction), route_id=route_id, order_by=[Trip.trip_id]
            )
            rows = await self._stop_times_with_stops(trip.trip_id)
            directions[str(direction)] = DirectionStops(
                direction_id=direction,
                trip_id=trip.trip_id,
                trip_headsign=trip.trip_headsign,
                stops=[_path_stop(st, stop) for st, stop in rows],
            )

        return RouteDirections(
            route_id=route_id,
            available_directions=available_directions,
            directions=directions,
        )
