"""API v1 router"""

from fastapi import APIRouter

from app.api.v1.endpoints import routes, stop_times, frequencies, transfers, shapes

api_router = APIRouter()

# All transit data is scoped by project; these use composite keys (project_id, entity_string_id)
api_router.include_router(routes.router, prefix="/projects/{project_id}/routes", tags=["routes"])
api_router.include_router(stop_times.router, prefix="/projects/{project_id}/trips", tags=["stop-times"])
api_router.include_router(frequencies.router, prefix="/projects/{project_id}", tags=["frequencies"])
api_router.include_router(transfers.router, prefix="/projects/{project_id}", tags=["transfers"])
api_router.include_router(shapes.router, prefix="/projects/{project_id}/shapes", tags=["shapes"])
