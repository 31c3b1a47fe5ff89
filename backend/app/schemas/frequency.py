"""Pydantic schemas for GTFS frequencies"""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator

from app.utils.gtfs_time import normalize_gtfs_time

GTFS_TIME_PATTERN = r"^\d{1,2}:\d{2}:\d{2}$"


class FrequencyCreate(BaseModel):
    """Schema for creating a frequency window"""

    trip_id: str = Field(..., description="GTFS trip_id")
    start_time: str = Field(..., pattern=GTFS_TIME_PATTERN, description="Window start (inclusive)")
    end_time: str = Field(..., pattern=GTFS_TIME_PATTERN, description="Window end (exclusive)")
    headway_secs: int = Field(..., description="Seconds between departures, must be positive")
    exact_times: int = Field(0, ge=0, le=1, description="0=frequency-based, 1=schedule-based")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_gtfs_time(cls, v: str) -> str:
        return normalize_gtfs_time(v)


class FrequencyUpdate(BaseModel):
    """Schema for updating a frequency window"""

    start_time: Optional[str] = Field(None, pattern=GTFS_TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=GTFS_TIME_PATTERN)
    headway_secs: Optional[int] = None
    exact_times: Optional[int] = Field(None, ge=0, le=1)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_gtfs_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return normalize_gtfs_time(v)


class FrequencyResponse(BaseModel):
    """Schema for frequency response"""

    id: int
    project_id: int
    trip_id: str
    start_time: str
    end_time: str
    headway_secs: int
    exact_times: int

    model_config = ConfigDict(from_attributes=True)


class FrequencyList(BaseModel):
    """Frequencies of one trip ordered by start time"""

    items: List[FrequencyResponse]
    total: int
