"""Shape (GTFS) management endpoints"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from app.api import deps
from app.core.exceptions import TransitDataError
from app.models.gtfs import Shape
from app.repositories.transit import TransitRepository
from app.schemas.shape import ShapeReplace, ShapeWithPoints, ShapePoint
from app.services.shape_service import ShapeService

router = APIRouter()


def shape_with_points(shape_id: str, points: List[Shape]) -> ShapeWithPoints:
    return ShapeWithPoints(
        shape_id=shape_id,
        points=[
            ShapePoint(
                lat=float(p.shape_pt_lat),
                lon=float(p.shape_pt_lon),
                sequence=p.shape_pt_sequence,
                dist_traveled=float(p.shape_dist_traveled) if p.shape_dist_traveled is not None else None,
            )
            for p in points
        ],
        total_points=len(points),
    )


@router.get("/{shape_id}", response_model=ShapeWithPoints)
async def get_shape(
    shape_id: str,
    repo: TransitRepository = Depends(deps.get_repository),
) -> ShapeWithPoints:
    """Get all points of a shape ordered by sequence"""
    try:
        points = await ShapeService(repo).get_shape(shape_id)
    except TransitDataError as e:
        raise deps.http_error(e)

    return shape_with_points(shape_id, points)


@router.put("/{shape_id}", response_model=ShapeWithPoints)
async def replace_shape(
    shape_id: str,
    payload: ShapeReplace,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> ShapeWithPoints:
    """
    Replace every point of a shape.

    Points without ``shape_pt_sequence`` take their position in the list.
    """
    try:
        points = await ShapeService(repo).replace_shape(
            shape_id,
            [point.model_dump() for point in payload.points],
            request=request,
        )
    except TransitDataError as e:
        raise deps.http_error(e)

    return shape_with_points(shape_id, points)


@router.delete("/{shape_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shape(
    shape_id: str,
    request: Request,
    repo: TransitRepository = Depends(deps.get_repository),
) -> Response:
    """Delete a shape and all its points"""
    try:
        await ShapeService(repo).delete_shape(shape_id, request=request)
    except TransitDataError as e:
        raise deps.http_error(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
