"""Shape service - polyline storage and generation from route stops"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Request
from sqlalchemy import and_

from app.core.exceptions import NotFoundError, ValidationFailedError, NoTopologyError
from app.models.audit import AuditAction
from app.models.gtfs import Shape, RouteStop, Stop
from app.models.keys import ShapePointKey
from app.repositories.transit import TransitRepository
from app.services.geodesy import haversine_distance
from app.utils.audit import create_audit_log

logger = logging.getLogger(__name__)


def _validate_points(
    project_id: int, shape_id: str, points: Sequence[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """Check coordinates, fill missing sequences with the list index"""
    if not points:
        raise ValidationFailedError("A shape needs at least one point")

    rows = []
    keys: set[ShapePointKey] = set()
    for index, point in enumerate(points):
        lat = point.get("shape_pt_lat")
        lon = point.get("shape_pt_lon")
        if lat is None or not -90 <= lat <= 90:
            raise ValidationFailedError(f"Point {index}: shape_pt_lat must be between -90 and 90")
        if lon is None or not -180 <= lon <= 180:
            raise ValidationFailedError(f"Point {index}: shape_pt_lon must be between -180 and 180")

        sequence = point.get("shape_pt_sequence")
        if sequence is None:
            sequence = index
        key = ShapePointKey(project_id, shape_id, sequence)
        if key in keys:
            raise ValidationFailedError(f"Duplicate shape_pt_sequence {sequence}")
        keys.add(key)

        rows.append({
            "shape_pt_lat": lat,
            "shape_pt_lon": lon,
            "shape_pt_sequence": sequence,
            "shape_dist_traveled": point.get("shape_dist_traveled"),
        })
    return rows


class ShapeService:
    """Shape management for one project"""

    def __init__(self, repo: TransitRepository):
        self.repo = repo

    async def get_shape(self, shape_id: str) -> List[Shape]:
        """Points of a shape ordered by sequence"""
        points = await self.repo.shapes.find_many(
            shape_id=shape_id, order_by=[Shape.shape_pt_sequence]
        )
        if not points:
            raise NotFoundError(f"Shape '{shape_id}' not found in this project")
        return points

    async def replace_shape(
        self,
        shape_id: str,
        points: Sequence[Dict[str, Any]],
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> List[Shape]:
        """Replace all points of a shape, creating it when it does not exist yet"""
        rows = _validate_points(self.repo.project_id, shape_id, points)

        try:
            deleted = await self.repo.shapes.delete_many(shape_id=shape_id)
            await self.repo.shapes.bulk_insert([{**row, "shape_id": shape_id} for row in rows])
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.REPLACE,
                entity_type="shape",
                entity_id=shape_id,
                description=f"Replaced shape '{shape_id}'",
                old_values={"points": deleted},
                new_values={"points": len(rows)},
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(f"Replaced shape {shape_id}: {deleted} -> {len(rows)} points")
        return await self.get_shape(shape_id)

    async def delete_shape(
        self,
        shape_id: str,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> int:
        try:
            deleted = await self.repo.shapes.delete_many(shape_id=shape_id)
            if deleted == 0:
                raise NotFoundError(f"Shape '{shape_id}' not found in this project")
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.DELETE,
                entity_type="shape",
                entity_id=shape_id,
                description=f"Deleted shape '{shape_id}'",
                old_values={"points": deleted},
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        return deleted

    async def generate_shape_from_route(
        self,
        route_id: str,
        direction_id: int = 0,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> tuple[str, List[Shape]]:
        """
        Connect the route's stops for one direction into a new shape.

        Distances along the shape are the running sum of great-circle
        distances between consecutive stops. Returns ``(shape_id, points)``.
        """
        if not await self.repo.routes.get(route_id=route_id):
            raise NotFoundError(f"Route '{route_id}' not found in this project")

        query = (
            self.repo.route_stops.select(route_id=route_id, direction_id=direction_id)
            .join(Stop, and_(
                RouteStop.project_id == Stop.project_id,
                RouteStop.stop_id == Stop.stop_id,
            ))
            .add_columns(Stop.stop_lat, Stop.stop_lon)
            .order_by(RouteStop.stop_sequence)
        )
        result = await self.repo.db.execute(query)
        coordinates = [(float(lat), float(lon)) for _, lat, lon in result.all()]
        if not coordinates:
            raise NoTopologyError(
                f"Route '{route_id}' has no stops assigned for direction {direction_id}"
            )

        shape_id = f"shape-{route_id}-{direction_id}-{int(time.time() * 1000)}"

        rows = []
        distance = 0.0
        for index, (lat, lon) in enumerate(coordinates):
            if index > 0:
                prev_lat, prev_lon = coordinates[index - 1]
                distance += haversine_distance(prev_lat, prev_lon, lat, lon)
            rows.append({
                "shape_id": shape_id,
                "shape_pt_sequence": index,
                "shape_pt_lat": lat,
                "shape_pt_lon": lon,
                "shape_dist_traveled": round(distance, 3),
            })

        try:
            await self.repo.shapes.bulk_insert(rows)
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.GENERATE,
                entity_type="shape",
                entity_id=shape_id,
                description=f"Generated shape from route '{route_id}' direction {direction_id}",
                new_values={"points": len(rows), "length_meters": round(distance, 3)},
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(f"Generated shape {shape_id} with {len(rows)} points ({distance:.0f}m)")
        return shape_id, await self.get_shape(shape_id)
