"""StopTime (GTFS) management endpoints, nested under a trip"""

from fastapi import APIRouter, Depends, Request, status

from app.api import deps
from app.core.exceptions import TransitDataError
from app.repositories.transit import TransitRepository
from app.schemas.stop_time import (
    StopTimesReplace,
    StopTimeResponse,
    StopTimeWithStop,
    StopTimeListWithStop,
    StopTimeBulkResult,
    StopTimeAutoGenerate,
)
from app.services.stop_time_service import StopTimeService, ScheduleOptions

router = APIRouter()


@router.get("/{trip_id}/stop-times", response_model=StopTimeListWithStop)
async def list_stop_times_for_trip(
    trip_id: str,
    repo: TransitRepository = Depends(deps.get_repository),
) -> StopTimeListWithStop:
    """
    List all stop times for a specific trip, ordered by sequence.

    Includes stop information for each stop time.
    """
    try:
        items = await StopTimeService(repo).list_stop_times(trip_id)
    except TransitDataError as e:
        raise deps.http_error(e)

    return StopTimeListWithStop(
        items=[StopTimeWithStop.model_validate(item) for item in items],
        total=len(items),
    )


@router.put("/{trip_id}/stop-times", response_model=StopTimeBulkResult)
async def replace_stop_times(
    trip_id: str,
    payload: StopTimesReplace,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> StopTimeBulkResult:
    """
    Replace every stop time of a trip.

    The whole list is validated before existing stop times are removed.
    """
    try:
        deleted, created = await StopTimeService(repo).replace_stop_times(
            trip_id,
            [stop_time.model_dump() for stop_time in payload.stop_times],
            deduplicate=payload.deduplicate,
            request=request,
        )
    except TransitDataError as e:
        raise deps.http_error(e)

    return StopTimeBulkResult(created=len(created), deleted=deleted)


@router.post(
    "/{trip_id}/stop-times/auto-generate",
    response_model=list[StopTimeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def auto_generate_stop_times(
    trip_id: str,
    request: Request,
    payload: StopTimeAutoGenerate = StopTimeAutoGenerate(),
    repo: TransitRepository = Depends(deps.get_repository),
) -> list[StopTimeResponse]:
    """
    Generate the trip's stop times from its route's stop list.

    Existing stop times of the trip are replaced.
    """
    options = ScheduleOptions(
        start_time=payload.start_time,
        time_between_stops_minutes=payload.time_between_stops_minutes,
        dwell_minutes=payload.dwell_minutes,
    )
    try:
        created = await StopTimeService(repo).generate_stop_times(trip_id, options, request=request)
    except TransitDataError as e:
        raise deps.http_error(e)

    return [StopTimeResponse.model_validate(stop_time) for stop_time in created]


@router.delete("/{trip_id}/stop-times", response_model=StopTimeBulkResult)
async def delete_stop_times(
    trip_id: str,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> StopTimeBulkResult:
    """Delete every stop time of a trip"""
    try:
        deleted = await StopTimeService(repo).delete_stop_times(trip_id, request=request)
    except TransitDataError as e:
        raise deps.http_error(e)

    return StopTimeBulkResult(deleted=deleted)
