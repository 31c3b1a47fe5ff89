"""Route derivation endpoints: drawable paths, directions and generated shapes"""

from fastapi import APIRouter, Depends, Query, Request, status

from app.api import deps
from app.core.exceptions import TransitDataError
from app.repositories.transit import TransitRepository
from app.schemas.route_path import RoutePathResponse, RouteDirections
from app.schemas.shape import ShapeGenerateRequest, ShapeWithPoints
from app.services.route_path_service import RoutePathService
from app.services.shape_service import ShapeService
from app.api.v1.endpoints.shapes import shape_with_points

router = APIRouter()


@router.get("/{route_id}/path", response_model=RoutePathResponse)
async def get_route_path(
    route_id: str,
    direction_id: int = Query(0, ge=0, le=1, description="0=outbound, 1=inbound"),
    repo: TransitRepository = Depends(deps.get_repository),
) -> RoutePathResponse:
    """
    Get the polyline and ordered stops of a route direction.

    When no trip of the direction has a shape yet the response has
    ``available: false`` instead of an error.
    """
    try:
        path = await RoutePathService(repo).get_route_path(route_id, direction_id)
    except TransitDataError as e:
        raise deps.http_error(e)

    if path is None:
        return RoutePathResponse(
            available=False,
            message=f"No trip with a shape found for route '{route_id}' direction {direction_id}",
        )
    return RoutePathResponse(available=True, path=path)


@router.get("/{route_id}/directions", response_model=RouteDirections)
async def get_route_directions(
    route_id: str,
    repo: TransitRepository = Depends(deps.get_repository),
) -> RouteDirections:
    """List the directions a route runs in, with the stops of each"""
    try:
        return await RoutePathService(repo).get_route_directions(route_id)
    except TransitDataError as e:
        raise deps.http_error(e)


@router.post(
    "/{route_id}/shapes/generate",
    response_model=ShapeWithPoints,
    status_code=status.HTTP_201_CREATED,
)
async def generate_shape_from_route(
    route_id: str,
    request: Request,
    payload: ShapeGenerateRequest = ShapeGenerateRequest(),
    repo: TransitRepository = Depends(deps.get_repository),
) -> ShapeWithPoints:
    """Create a new shape connecting the route's stops for one direction"""
    try:
        shape_id, points = await ShapeService(repo).generate_shape_from_route(
            route_id, payload.direction_id, request=request
        )
    except TransitDataError as e:
        raise deps.http_error(e)

    return shape_with_points(shape_id, points)
