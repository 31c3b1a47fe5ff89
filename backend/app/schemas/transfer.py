"""Pydantic schemas for GTFS transfers"""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from app.core.config import settings


class TransferCreate(BaseModel):
    """Schema for creating a transfer rule"""

    from_stop_id: str = Field(..., description="Stop where the transfer starts")
    to_stop_id: str = Field(..., description="Stop where the transfer ends")
    transfer_type: int = Field(
        0, description="0=recommended, 1=timed, 2=minimum time required, 3=not possible"
    )
    min_transfer_time: Optional[int] = Field(None, ge=0, description="Seconds needed to transfer")


class TransferUpdate(BaseModel):
    """Schema for updating a transfer rule"""

    transfer_type: Optional[int] = None
    min_transfer_time: Optional[int] = Field(None, ge=0)


class TransferResponse(BaseModel):
    """Schema for transfer response"""

    id: int
    project_id: int
    from_stop_id: str
    to_stop_id: str
    transfer_type: int
    min_transfer_time: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class TransfersByStop(BaseModel):
    """Transfers leaving and arriving at one stop"""

    outgoing: List[TransferResponse]
    incoming: List[TransferResponse]


class TransferGenerateRequest(BaseModel):
    """Options for generating transfers between nearby stops"""

    max_distance_meters: float = Field(
        default=settings.TRANSFER_MAX_DISTANCE_METERS, ge=0, description="Maximum distance between stops"
    )
    default_transfer_type: int = Field(
        default=settings.TRANSFER_DEFAULT_TYPE, ge=0, le=3, description="transfer_type of generated rows"
    )
    default_min_transfer_time: Optional[int] = Field(
        default=settings.TRANSFER_DEFAULT_MIN_TIME, ge=0, description="min_transfer_time of generated rows"
    )


class TransferGenerateResult(BaseModel):
    """Outcome of a transfer generation run"""

    generated: int = Field(..., description="Number of transfer rows inserted by this run")
    pairs_in_range: int = Field(..., description="Stop pairs found within the distance threshold")
    transfers: List[TransferResponse] = Field(default_factory=list)
