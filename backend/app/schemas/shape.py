"""Pydantic schemas for GTFS shapes"""

from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field


class ShapePointCreate(BaseModel):
    """Single point of a shape replace request"""

    shape_pt_lat: Decimal = Field(..., ge=-90, le=90)
    shape_pt_lon: Decimal = Field(..., ge=-180, le=180)
    shape_pt_sequence: Optional[int] = Field(
        None, ge=0, description="Defaults to the point's position in the list"
    )
    shape_dist_traveled: Optional[Decimal] = Field(None, ge=0)


class ShapeReplace(BaseModel):
    """Schema for replacing all points of a shape"""

    points: List[ShapePointCreate] = Field(..., min_length=1, description="List of shape points")


class ShapePoint(BaseModel):
    """Simple shape point for visualization"""

    lat: float
    lon: float
    sequence: int
    dist_traveled: Optional[float] = None


class ShapeWithPoints(BaseModel):
    """Shape grouped by shape_id with all points"""

    shape_id: str
    points: List[ShapePoint]
    total_points: int


class ShapeGenerateRequest(BaseModel):
    """Build a shape from the stop coordinates of a route direction"""

    direction_id: int = Field(0, ge=0, le=1)
