"""Frequency (GTFS) management endpoints"""

from fastapi import APIRouter, Depends, Request, Response, status

from app.api import deps
from app.core.exceptions import TransitDataError
from app.repositories.transit import TransitRepository
from app.schemas.frequency import (
    FrequencyCreate,
    FrequencyUpdate,
    FrequencyResponse,
    FrequencyList,
)
from app.services.frequency_service import FrequencyService

router = APIRouter()


@router.get("/trips/{trip_id}/frequencies", response_model=FrequencyList)
async def list_frequencies_for_trip(
    trip_id: str,
    repo: TransitRepository = Depends(deps.get_repository),
) -> FrequencyList:
    """List the headway windows of a trip ordered by start time"""
    try:
        frequencies = await FrequencyService(repo).list_frequencies_for_trip(trip_id)
    except TransitDataError as e:
        raise deps.http_error(e)

    return FrequencyList(
        items=[FrequencyResponse.model_validate(f) for f in frequencies],
        total=len(frequencies),
    )


@router.post("/frequencies", response_model=FrequencyResponse, status_code=status.HTTP_201_CREATED)
async def create_frequency(
    payload: FrequencyCreate,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> FrequencyResponse:
    """
    Add a headway window to a trip.

    Returns 409 when the window overlaps another window of the same trip.
    """
    try:
        frequency = await FrequencyService(repo).create_frequency(
            trip_id=payload.trip_id,
            start_time=payload.start_time,
            end_time=payload.end_time,
            headway_secs=payload.headway_secs,
            exact_times=payload.exact_times,
            request=request,
        )
    except TransitDataError as e:
        raise deps.http_error(e)

    return FrequencyResponse.model_validate(frequency)


@router.patch("/frequencies/{frequency_id}", response_model=FrequencyResponse)
async def update_frequency(
    frequency_id: int,
    payload: FrequencyUpdate,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> FrequencyResponse:
    """Update a headway window; the result must not overlap other windows of the trip"""
    try:
        frequency = await FrequencyService(repo).update_frequency(
            frequency_id,
            payload.model_dump(exclude_unset=True),
            request=request,
        )
    except TransitDataError as e:
        raise deps.http_error(e)

    return FrequencyResponse.model_validate(frequency)


@router.delete("/frequencies/{frequency_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_frequency(
    frequency_id: int,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> Response:
    try:
        await FrequencyService(repo).delete_frequency(frequency_id, request=request)
    except TransitDataError as e:
        raise deps.http_error(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/trips/{trip_id}/frequencies/generate",
    response_model=FrequencyList,
    status_code=status.HTTP_201_CREATED,
)
async def generate_default_frequencies(
    trip_id: str,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> FrequencyList:
    """Replace the trip's windows with the default peak and off-peak headways"""
    try:
        frequencies = await FrequencyService(repo).generate_default_frequencies(trip_id, request=request)
    except TransitDataError as e:
        raise deps.http_error(e)

    return FrequencyList(
        items=[FrequencyResponse.model_validate(f) for f in frequencies],
        total=len(frequencies),
    )
