"""
Frequency service.

Keeps the headway windows of a trip non-overlapping. Windows are half-open
``[start_time, end_time)``, so a window may start exactly where another ends.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request

from app.core.exceptions import NotFoundError, ValidationFailedError, OverlappingFrequencyError
from app.models.audit import AuditAction
from app.models.gtfs import Frequency
from app.repositories.transit import TransitRepository
from app.utils.audit import create_audit_log, serialize_model
from app.utils.gtfs_time import GTFSTime, intervals_overlap

logger = logging.getLogger(__name__)

# (start_time, end_time, headway_secs): morning peak, midday, evening peak
DEFAULT_FREQUENCY_WINDOWS = [
    ("06:00:00", "09:00:00", 600),
    ("09:00:00", "16:00:00", 900),
    ("16:00:00", "19:00:00", 600),
]


def _parse_window(start_time: str, end_time: str) -> tuple[GTFSTime, GTFSTime]:
    try:
        start = GTFSTime.parse(start_time)
        end = GTFSTime.parse(end_time)
    except ValueError as e:
        raise ValidationFailedError(str(e))
    if end <= start:
        raise ValidationFailedError(
            f"end_time {end.format()} must be after start_time {start.format()}"
        )
    return start, end


def _validate_headway(headway_secs: Any, exact_times: Any) -> None:
    if isinstance(headway_secs, bool) or not isinstance(headway_secs, int) or headway_secs <= 0:
        raise ValidationFailedError("headway_secs must be a positive integer")
    if exact_times not in (0, 1):
        raise ValidationFailedError("exact_times must be 0 or 1")


class FrequencyService:
    """Frequency window management for one project"""

    def __init__(self, repo: TransitRepository):
        self.repo = repo

    async def _get_frequency(self, frequency_id: int) -> Frequency:
        frequency = await self.repo.frequencies.get(id=frequency_id)
        if not frequency:
            raise NotFoundError(f"Frequency {frequency_id} not found in this project")
        return frequency

    async def _ensure_trip(self, trip_id: str) -> None:
        if not await self.repo.trips.get(trip_id=trip_id):
            raise NotFoundError(f"Trip '{trip_id}' not found in this project")

    async def _check_overlap(
        self,
        trip_id: str,
        start: GTFSTime,
        end: GTFSTime,
        exclude_id: Optional[int] = None,
    ) -> None:
        criteria = [Frequency.id != exclude_id] if exclude_id is not None else []
        others = await self.repo.frequencies.find_many(*criteria, trip_id=trip_id)

        for other in others:
            other_start = GTFSTime.parse(other.start_time)
            other_end = GTFSTime.parse(other.end_time)
            if intervals_overlap(start, end, other_start, other_end):
                logger.warning(
                    f"Rejected frequency {start}-{end} for trip {trip_id}: "
                    f"overlaps {other.start_time}-{other.end_time} (id {other.id})"
                )
                raise OverlappingFrequencyError(
                    f"Frequency {start}-{end} overlaps existing frequency "
                    f"{other.start_time}-{other.end_time} of trip '{trip_id}'"
                )

    async def list_frequencies_for_trip(self, trip_id: str) -> List[Frequency]:
        await self._ensure_trip(trip_id)
        frequencies = await self.repo.frequencies.find_many(trip_id=trip_id)
        return sorted(frequencies, key=lambda f: GTFSTime.parse(f.start_time))

    async def create_frequency(
        self,
        trip_id: str,
        start_time: str,
        end_time: str,
        headway_secs: int,
        exact_times: int = 0,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> Frequency:
        """
        Add a headway window to a trip.

        Raises:
            ValidationFailedError: bad times, non-positive headway or bad exact_times
            NotFoundError: trip does not exist
            OverlappingFrequencyError: window overlaps another window of the trip
        """
        start, end = _parse_window(start_time, end_time)
        _validate_headway(headway_secs, exact_times)
        await self._ensure_trip(trip_id)
        await self._check_overlap(trip_id, start, end)

        try:
            frequency = await self.repo.frequencies.add(
                trip_id=trip_id,
                start_time=start.format(),
                end_time=end.format(),
                headway_secs=headway_secs,
                exact_times=exact_times,
                created_by=actor_id,
            )
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.CREATE,
                entity_type="frequency",
                entity_id=str(frequency.id),
                description=f"Created frequency {start}-{end} for trip '{trip_id}'",
                new_values=serialize_model(frequency),
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(f"Created frequency {frequency.id} for trip {trip_id}")
        return frequency

    async def update_frequency(
        self,
        frequency_id: int,
        changes: Dict[str, Any],
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> Frequency:
        """Apply a partial update; the merged window is validated and overlap-checked"""
        frequency = await self._get_frequency(frequency_id)

        start_time = changes.get("start_time") or frequency.start_time
        end_time = changes.get("end_time") or frequency.end_time
        headway_secs = changes.get("headway_secs", frequency.headway_secs)
        exact_times = changes.get("exact_times", frequency.exact_times)
        if headway_secs is None:
            headway_secs = frequency.headway_secs
        if exact_times is None:
            exact_times = frequency.exact_times

        start, end = _parse_window(start_time, end_time)
        _validate_headway(headway_secs, exact_times)
        await self._check_overlap(frequency.trip_id, start, end, exclude_id=frequency.id)

        old_values = serialize_model(frequency)
        try:
            frequency.start_time = start.format()
            frequency.end_time = end.format()
            frequency.headway_secs = headway_secs
            frequency.exact_times = exact_times
            await self.repo.db.flush()
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.UPDATE,
                entity_type="frequency",
                entity_id=str(frequency.id),
                description=f"Updated frequency {frequency.id} of trip '{frequency.trip_id}'",
                old_values=old_values,
                new_values=serialize_model(frequency),
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        return frequency

    async def delete_frequency(
        self,
        frequency_id: int,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> None:
        frequency = await self._get_frequency(frequency_id)
        old_values = serialize_model(frequency)

        try:
            await self.repo.frequencies.delete_many(id=frequency_id)
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.DELETE,
                entity_type="frequency",
                entity_id=str(frequency_id),
                description=f"Deleted frequency {frequency_id} of trip '{frequency.trip_id}'",
                old_values=old_values,
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(f"Deleted frequency {frequency_id}")

    async def generate_default_frequencies(
        self,
        trip_id: str,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> List[Frequency]:
        """Replace the trip's windows with the default peak/off-peak pattern"""
        await self._ensure_trip(trip_id)

        rows = [
            {
                "trip_id": trip_id,
                "start_time": start_time,
                "end_time": end_time,
                "headway_secs": headway_secs,
                "exact_times": 0,
                "created_by": actor_id,
            }
            for start_time, end_time, headway_secs in DEFAULT_FREQUENCY_WINDOWS
        ]

        try:
            deleted = await self.repo.frequencies.delete_many(trip_id=trip_id)
            created = await self.repo.frequencies.bulk_insert(rows)
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.GENERATE,
                entity_type="frequency",
                entity_id=trip_id,
                description=f"Generated default frequencies for trip '{trip_id}'",
                old_values={"count": deleted},
                new_values={"count": len(created)},
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(f"Generated {len(created)} default frequencies for trip {trip_id}, replaced {deleted}")
        return created
