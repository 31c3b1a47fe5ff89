"""Schemas for route paths composed from trip, shape and stop time data"""

from typing import Optional, List, Dict
from pydantic import BaseModel, Field


class PathPoint(BaseModel):
    """One polyline vertex"""

    lat: float
    lon: float
    sequence: int
    dist_traveled: Optional[float] = None


class PathStop(BaseModel):
    """Stop marker drawn along a route path"""

    stop_id: str
    stop_name: Optional[str] = None
    stop_lat: Optional[float] = None
    stop_lon: Optional[float] = None
    stop_sequence: int
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None
    shape_dist_traveled: Optional[float] = None


class RoutePath(BaseModel):
    """Polyline plus ordered unique stops of a route direction"""

    route_id: str
    direction_id: int
    trip_id: str = Field(..., description="Representative trip the path was built from")
    shape_id: str
    polyline: List[PathPoint]
    stops: List[PathStop]


class RoutePathResponse(BaseModel):
    """Route path lookup result; available=False when no trip of the direction has a shape yet"""

    available: bool
    message: Optional[str] = None
    path: Optional[RoutePath] = None


class DirectionStops(BaseModel):
    """Stops of a representative trip for one direction"""

    direction_id: int
    trip_id: str
    trip_headsign: Optional[str] = None
    stops: List[PathStop]


class RouteDirections(BaseModel):
    """Directions served by a route with their stop sequences"""

    route_id: str
    available_directions: List[int]
    directions: Dict[str, DirectionStops]
