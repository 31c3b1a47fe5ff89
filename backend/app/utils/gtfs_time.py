"""GTFS service-day time values.

GTFS times are ``HH:MM:SS`` strings measured from the start of the service
day, so hours may exceed 23 for trips running past midnight. All arithmetic and
comparisons work on total seconds; strings only appear when parsing input and
formatting output.
"""

import re
from dataclasses import dataclass

_GTFS_TIME_RE = re.compile(r"^(\d{1,3}):(\d{2}):(\d{2})$")

# Upper bound accepted on input, matches the API validators
MAX_GTFS_HOURS = 48


@dataclass(frozen=True, order=True)
class GTFSTime:
    """Seconds since service-day start"""

    seconds: int

    def __post_init__(self):
        if self.seconds < 0:
            raise ValueError("GTFS time cannot be negative")

    @classmethod
    def parse(cls, value: str) -> "GTFSTime":
        """Parse ``H:MM:SS`` / ``HH:MM:SS``; hours above 23 are allowed"""
        match = _GTFS_TIME_RE.match(value.strip()) if isinstance(value, str) else None
        if not match:
            raise ValueError(f"Invalid GTFS time '{value}', expected HH:MM:SS")

        hours, minutes, seconds = (int(part) for part in match.groups())
        if minutes > 59 or seconds > 59:
            raise ValueError(f"Invalid GTFS time '{value}', minutes and seconds must be 0-59")
        if hours > MAX_GTFS_HOURS:
            raise ValueError(f"Invalid GTFS time '{value}', hours must be between 0 and {MAX_GTFS_HOURS}")

        return cls(hours * 3600 + minutes * 60 + seconds)

    @classmethod
    def from_minutes(cls, minutes: int) -> "GTFSTime":
        return cls(minutes * 60)

    def add_minutes(self, minutes: int) -> "GTFSTime":
        return GTFSTime(self.seconds + minutes * 60)

    def add_seconds(self, seconds: int) -> "GTFSTime":
        return GTFSTime(self.seconds + seconds)

    def format(self) -> str:
        """Zero-padded ``HH:MM:SS``"""
        hours, remainder = divmod(self.seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def __str__(self) -> str:
        return self.format()


def normalize_gtfs_time(value: str) -> str:
    """Re-format a GTFS time string with zero padding (``6:00:00`` -> ``06:00:00``)"""
    return GTFSTime.parse(value).format()


def intervals_overlap(
    start_a: GTFSTime, end_a: GTFSTime, start_b: GTFSTime, end_b: GTFSTime
) -> bool:
    """Half-open intervals [start_a, end_a) and [start_b, end_b) share at least one instant"""
    return start_a < end_b and start_b < end_a
