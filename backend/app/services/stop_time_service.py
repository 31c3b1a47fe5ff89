"""
Stop time service.

Generates a trip's timetable from its route topology and handles bulk
replacement of stop times. Every write replaces the trip's stop times inside
one transaction.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Request
from sqlalchemy import and_

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationFailedError, NoTopologyError
from app.models.audit import AuditAction
from app.models.gtfs import Trip, RouteStop, StopTime, Stop
from app.models.keys import StopTimeKey
from app.repositories.transit import TransitRepository
from app.services.processors import deduplicate_stop_times
from app.utils.audit import create_audit_log
from app.utils.gtfs_time import GTFSTime

logger = logging.getLogger(__name__)


@dataclass
class ScheduleOptions:
    """Clock parameters for generated stop times"""

    start_time: str = settings.SCHEDULE_DEFAULT_START_TIME
    time_between_stops_minutes: int = settings.SCHEDULE_DEFAULT_TRAVEL_MINUTES
    dwell_minutes: int = settings.SCHEDULE_DEFAULT_DWELL_MINUTES


def build_schedule(
    stop_ids: Sequence[str],
    start: GTFSTime,
    travel_minutes: int,
    dwell_minutes: int,
) -> List[Dict[str, Any]]:
    """
    Walk the stops with a running clock.

    Arrival is the clock; departure adds the dwell except at the last stop;
    the clock then moves on by the travel time.
    """
    rows = []
    clock = start
    last_index = len(stop_ids) - 1

    for index, stop_id in enumerate(stop_ids):
        arrival = clock
        departure = arrival if index == last_index else arrival.add_minutes(dwell_minutes)
        rows.append({
            "stop_id": stop_id,
            "stop_sequence": index,
            "arrival_time": arrival.format(),
            "departure_time": departure.format(),
            "pickup_type": 0,
            "drop_off_type": 0,
            "timepoint": 1,
        })
        if index < last_index:
            clock = departure.add_minutes(travel_minutes)

    return rows


class StopTimeService:
    """Stop time generation, replacement and lookup for one project"""

    def __init__(self, repo: TransitRepository):
        self.repo = repo

    async def _get_trip(self, trip_id: str) -> Trip:
        trip = await self.repo.trips.get(trip_id=trip_id)
        if not trip:
            raise NotFoundError(f"Trip '{trip_id}' not found in this project")
        return trip

    async def _replace(self, trip_id: str, rows: Sequence[Dict[str, Any]]) -> tuple[int, List[StopTime]]:
        deleted = await self.repo.stop_times.delete_many(trip_id=trip_id)
        created = await self.repo.stop_times.bulk_insert(
            [{**row, "trip_id": trip_id} for row in rows]
        )
        return deleted, created

    async def generate_stop_times(
        self,
        trip_id: str,
        options: Optional[ScheduleOptions] = None,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> List[StopTime]:
        """
        Replace a trip's stop times with a timetable derived from its route's
        stop list for the trip's direction.

        Raises:
            NotFoundError: trip does not exist
            ValidationFailedError: bad start time or negative minutes
            NoTopologyError: the route has no stops for the trip's direction
        """
        options = options or ScheduleOptions()

        try:
            start = GTFSTime.parse(options.start_time)
        except ValueError as e:
            raise ValidationFailedError(str(e))
        if options.time_between_stops_minutes < 0 or options.dwell_minutes < 0:
            raise ValidationFailedError("time_between_stops_minutes and dwell_minutes must not be negative")

        trip = await self._get_trip(trip_id)
        direction_id = trip.direction_id or 0

        route_stops = await self.repo.route_stops.find_many(
            route_id=trip.route_id,
            direction_id=direction_id,
            order_by=[RouteStop.stop_sequence],
        )
        if not route_stops:
            logger.warning(
                f"Cannot generate stop times for trip {trip_id}: route {trip.route_id} "
                f"has no stops for direction {direction_id}"
            )
            raise NoTopologyError(
                f"Route '{trip.route_id}' has no stops assigned for direction {direction_id}"
            )

        rows = build_schedule(
            [rs.stop_id for rs in route_stops],
            start,
            options.time_between_stops_minutes,
            options.dwell_minutes,
        )

        try:
            deleted, created = await self._replace(trip_id, rows)
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.GENERATE,
                entity_type="stop_times",
                entity_id=trip_id,
                description=f"Generated {len(created)} stop times for trip '{trip_id}'",
                new_values={
                    "start_time": start.format(),
                    "time_between_stops_minutes": options.time_between_stops_minutes,
                    "dwell_minutes": options.dwell_minutes,
                    "deleted": deleted,
                    "created": len(created),
                },
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(
            f"Generated {len(created)} stop times for trip {trip_id} "
            f"(project {self.repo.project_id}, replaced {deleted})"
        )
        return created

    def _validate_rows(self, rows: Sequence[Dict[str, Any]]) -> None:
        keys: set[StopTimeKey] = set()
        for row in rows:
            sequence = row.get("stop_sequence")
            if sequence is None or sequence < 0:
                raise ValidationFailedError("stop_sequence must be a non-negative integer")
            key = StopTimeKey(self.repo.project_id, row["trip_id"], sequence)
            if key in keys:
                raise ValidationFailedError(f"Duplicate stop_sequence {sequence} in trip '{key.trip.trip_id}'")
            keys.add(key)

            try:
                arrival = GTFSTime.parse(row["arrival_time"])
                departure = GTFSTime.parse(row["departure_time"])
            except (KeyError, ValueError) as e:
                raise ValidationFailedError(f"Invalid time at stop_sequence {sequence}: {e}")
            if departure < arrival:
                raise ValidationFailedError(
                    f"departure_time must be >= arrival_time at stop_sequence {sequence}"
                )
            row["arrival_time"] = arrival.format()
            row["departure_time"] = departure.format()

        previous = None
        for row in sorted(rows, key=lambda r: r["stop_sequence"]):
            arrival = GTFSTime.parse(row["arrival_time"])
            if previous is not None and arrival < GTFSTime.parse(previous["departure_time"]):
                raise ValidationFailedError(
                    f"arrival_time at stop_sequence {row['stop_sequence']} is earlier than "
                    f"departure_time at stop_sequence {previous['stop_sequence']}"
                )
            previous = row

    async def replace_stop_times(
        self,
        trip_id: str,
        stop_times: Sequence[Dict[str, Any]],
        deduplicate: bool = False,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> tuple[int, List[StopTime]]:
        """
        Replace every stop time of a trip with the given rows.

        All rows are validated before anything is deleted. With
        ``deduplicate`` set, consecutive visits to the same stop are dropped
        first. Returns ``(deleted, created)``.
        """
        trip = await self._get_trip(trip_id)

        rows = [dict(row, trip_id=trip.trip_id) for row in stop_times]
        if not rows:
            raise ValidationFailedError("At least one stop time is required")

        self._validate_rows(rows)

        if deduplicate:
            before = len(rows)
            rows = deduplicate_stop_times(rows)
            if len(rows) != before:
                logger.info(f"Dropped {before - len(rows)} repeated stops from trip {trip_id}")

        stop_ids = {row["stop_id"] for row in rows}
        found = await self.repo.stops.find_many(Stop.stop_id.in_(stop_ids))
        missing = stop_ids - {stop.stop_id for stop in found}
        if missing:
            logger.warning(f"Rejected stop times for trip {trip_id}: unknown stops {sorted(missing)}")
            raise ValidationFailedError(f"Stops not found in this project: {', '.join(sorted(missing))}")

        rows = [{k: v for k, v in row.items() if k != "trip_id"} for row in rows]

        try:
            deleted, created = await self._replace(trip_id, rows)
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.REPLACE,
                entity_type="stop_times",
                entity_id=trip_id,
                description=f"Replaced stop times for trip '{trip_id}'",
                old_values={"count": deleted},
                new_values={"count": len(created), "deduplicated": deduplicate},
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(f"Replaced {deleted} stop times with {len(created)} for trip {trip_id}")
        return deleted, created

    async def list_stop_times(self, trip_id: str) -> List[Dict[str, Any]]:
        """Stop times of a trip ordered by sequence, with stop name and coordinates"""
        await self._get_trip(trip_id)

        query = (
            self.repo.stop_times.select(trip_id=trip_id)
            .outerjoin(Stop, and_(
                StopTime.project_id == Stop.project_id,
                StopTime.stop_id == Stop.stop_id,
            ))
            .add_columns(Stop.stop_name, Stop.stop_lat, Stop.stop_lon)
            .order_by(StopTime.stop_sequence)
        )
        result = await self.repo.db.execute(query)

        items = []
        for stop_time, stop_name, stop_lat, stop_lon in result.all():
            items.append({
                "project_id": stop_time.project_id,
                "trip_id": stop_time.trip_id,
                "stop_id": stop_time.stop_id,
                "stop_sequence": stop_time.stop_sequence,
                "arrival_time": stop_time.arrival_time,
                "departure_time": stop_time.departure_time,
                "stop_headsign": stop_time.stop_headsign,
                "pickup_type": stop_time.pickup_type,
                "drop_off_type": stop_time.drop_off_type,
                "shape_dist_traveled": stop_time.shape_dist_traveled,
                "timepoint": stop_time.timepoint,
                "stop_name": stop_name,
                "stop_lat": stop_lat,
                "stop_lon": stop_lon,
            })
        return items

    async def delete_stop_times(
        self,
        trip_id: str,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> int:
        """Delete every stop time of a trip, returns the number removed"""
        await self._get_trip(trip_id)

        try:
            deleted = await self.repo.stop_times.delete_many(trip_id=trip_id)
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.DELETE,
                entity_type="stop_times",
                entity_id=trip_id,
                description=f"Deleted stop times for trip '{trip_id}'",
                old_values={"count": deleted},
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(f"Deleted {deleted} stop times for trip {trip_id}")
        return deleted
