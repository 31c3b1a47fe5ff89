"""StopTime (GTFS) schemas for API requests and responses"""

from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from app.core.config import settings
from app.utils.gtfs_time import GTFSTime, normalize_gtfs_time

GTFS_TIME_PATTERN = r"^\d{1,2}:\d{2}:\d{2}$"


class StopTimeBase(BaseModel):
    """Base stop time schema"""

    stop_id: str = Field(..., description="GTFS stop_id")
    arrival_time: str = Field(..., pattern=GTFS_TIME_PATTERN, description="Arrival time (HH:MM:SS, can exceed 24)")
    departure_time: str = Field(..., pattern=GTFS_TIME_PATTERN, description="Departure time (HH:MM:SS, can exceed 24)")
    stop_sequence: int = Field(..., ge=0, description="Order of stop in trip")
    stop_headsign: Optional[str] = Field(None, max_length=255, description="Headsign for this stop")
    pickup_type: Optional[int] = Field(
        0, ge=0, le=3, description="0=regular, 1=none, 2=phone, 3=driver"
    )
    drop_off_type: Optional[int] = Field(
        0, ge=0, le=3, description="0=regular, 1=none, 2=phone, 3=driver"
    )
    shape_dist_traveled: Optional[Decimal] = Field(None, ge=0, description="Distance from first stop")
    timepoint: Optional[int] = Field(1, ge=0, le=1, description="0=approximate, 1=exact")

    @field_validator("arrival_time", "departure_time")
    @classmethod
    def validate_gtfs_time(cls, v: str) -> str:
        """Validate GTFS time format (HH:MM:SS, can exceed 24 hours) and zero-pad it"""
        return normalize_gtfs_time(v)

    @model_validator(mode="after")
    def validate_time_order(self) -> "StopTimeBase":
        """Ensure departure_time >= arrival_time"""
        if GTFSTime.parse(self.departure_time) < GTFSTime.parse(self.arrival_time):
            raise ValueError("departure_time must be >= arrival_time")
        return self


class StopTimeCreate(StopTimeBase):
    """One stop time of a bulk replace request"""

    pass


class StopTimesReplace(BaseModel):
    """Replace every stop time of a trip"""

    stop_times: List[StopTimeCreate] = Field(..., min_length=1, description="Stop times in sequence")
    deduplicate: bool = Field(
        default=False, description="Drop consecutive visits to the same stop before saving"
    )


class StopTimeResponse(StopTimeBase):
    """Schema for stop time response"""

    project_id: int
    trip_id: str

    model_config = ConfigDict(from_attributes=True)


class StopTimeWithStop(StopTimeResponse):
    """Stop time with stop information"""

    stop_name: Optional[str] = None
    stop_lat: Optional[Decimal] = None
    stop_lon: Optional[Decimal] = None


class StopTimeListWithStop(BaseModel):
    """List of stop times with stop information"""

    items: List[StopTimeWithStop] = Field(..., description="Stop times with stop info")
    total: int = Field(..., description="Total number of stop times")


class StopTimeBulkResult(BaseModel):
    """Result of bulk stop time operation"""

    created: int = Field(default=0, description="Number of stop times created")
    deleted: int = Field(default=0, description="Number of stop times deleted")


class StopTimeAutoGenerate(BaseModel):
    """Options for generating a trip's stop times from its route topology"""

    start_time: str = Field(
        default=settings.SCHEDULE_DEFAULT_START_TIME,
        pattern=GTFS_TIME_PATTERN,
        description="Arrival time at the first stop",
    )
    time_between_stops_minutes: int = Field(
        default=settings.SCHEDULE_DEFAULT_TRAVEL_MINUTES, ge=0, description="Travel minutes between stops"
    )
    dwell_minutes: int = Field(
        default=settings.SCHEDULE_DEFAULT_DWELL_MINUTES, ge=0, description="Minutes stopped at each stop"
    )

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return normalize_gtfs_time(v)
