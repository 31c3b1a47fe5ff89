"""Transfer (GTFS) management and generation endpoints"""

from fastapi import APIRouter, Depends, Request, Response, status

from app.api import deps
from app.core.exceptions import TransitDataError
from app.repositories.transit import TransitRepository
from app.schemas.transfer import (
    TransferCreate,
    TransferUpdate,
    TransferResponse,
    TransfersByStop,
    TransferGenerateRequest,
    TransferGenerateResult,
)
from app.services.transfer_service import TransferService, TransferGenerationOptions

router = APIRouter()


@router.post("/transfers", response_model=TransferResponse, status_code=status.HTTP_201_CREATED)
async def create_transfer(
    payload: TransferCreate,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> TransferResponse:
    """Create a directional transfer rule between two stops"""
    try:
        transfer = await TransferService(repo).create_transfer(
            from_stop_id=payload.from_stop_id,
            to_stop_id=payload.to_stop_id,
            transfer_type=payload.transfer_type,
            min_transfer_time=payload.min_transfer_time,
            request=request,
        )
    except TransitDataError as e:
        raise deps.http_error(e)

    return TransferResponse.model_validate(transfer)


@router.post("/transfers/generate", response_model=TransferGenerateResult)
async def generate_transfers(
    request: Request,
    payload: TransferGenerateRequest = TransferGenerateRequest(),
    repo: TransitRepository = Depends(deps.get_repository),
) -> TransferGenerateResult:
    """
    Create transfers in both directions between stops within walking distance.

    Pairs that already have a transfer in either direction are skipped, so a
    second run reports ``generated: 0``.
    """
    options = TransferGenerationOptions(
        max_distance_meters=payload.max_distance_meters,
        default_transfer_type=payload.default_transfer_type,
        default_min_transfer_time=payload.default_min_transfer_time,
    )
    try:
        result = await TransferService(repo).generate_transfers_for_nearby_stops(options, request=request)
    except TransitDataError as e:
        raise deps.http_error(e)

    return TransferGenerateResult(
        generated=result.generated,
        pairs_in_range=result.pairs_in_range,
        transfers=[TransferResponse.model_validate(t) for t in result.transfers],
    )


@router.patch("/transfers/{transfer_id}", response_model=TransferResponse)
async def update_transfer(
    transfer_id: int,
    payload: TransferUpdate,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> TransferResponse:
    try:
        transfer = await TransferService(repo).update_transfer(
            transfer_id, payload.model_dump(exclude_unset=True), request=request
        )
    except TransitDataError as e:
        raise deps.http_error(e)

    return TransferResponse.model_validate(transfer)


@router.delete("/transfers/{transfer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transfer(
    transfer_id: int,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> Response:
    try:
        await TransferService(repo).delete_transfer(transfer_id, request=request)
    except TransitDataError as e:
        raise deps.http_error(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stops/{stop_id}/transfers", response_model=TransfersByStop)
async def get_transfers_for_stop(
    stop_id: str,
    repo: TransitRepository = Depends(deps.get_repository),
) -> TransfersByStop:
    """Transfers leaving from and arriving at a stop"""
    try:
        transfers = await TransferService(repo).get_transfers_for_stop(stop_id)
    except TransitDataError as e:
        raise deps.http_error(e)

    return TransfersByStop(
        outgoing=[TransferResponse.model_validate(t) for t in transfers["outgoing"]],
        incoming=[TransferResponse.model_validate(t) for t in transfers["incoming"]],
    )
