"""API dependencies for database access and project scoping"""

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    TransitDataError,
    NotFoundError,
    ValidationFailedError,
    ConflictError,
    NoTopologyError,
)
from app.db.session import get_db
from app.repositories.transit import TransitRepository

__all__ = ["get_db", "get_repository", "http_error"]


async def get_repository(
    project_id: int,
    db: AsyncSession = Depends(get_db),
) -> TransitRepository:
    """
    Resolve the project from the path and build its repository

    Raises:
        HTTPException: If the project does not exist
    """
    repo = await TransitRepository.for_project(db, project_id)
    if repo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project {project_id} not found",
        )
    return repo


# Most specific classes first; OverlappingFrequencyError is a ConflictError
_ERROR_STATUS = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationFailedError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NoTopologyError, status.HTTP_422_UNPROCESSABLE_ENTITY),
]


def http_error(error: TransitDataError) -> HTTPException:
    """Translate a domain error into the HTTP error returned to clients"""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in _ERROR_STATUS:
        if isinstance(error, error_class):
            status_code = code
            break
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message},
    )
