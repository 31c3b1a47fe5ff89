"""Composite natural keys of GTFS entities.

Each key carries the project it belongs to, so two keys from different
projects never compare equal.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TripKey:
    project_id: int
    trip_id: str


@dataclass(frozen=True)
class StopKey:
    project_id: int
    stop_id: str


@dataclass(frozen=True)
class StopTimeKey:
    project_id: int
    trip_id: str
    stop_sequence: int

    @property
    def trip(self) -> TripKey:
        return TripKey(self.project_id, self.trip_id)


@dataclass(frozen=True)
class ShapePointKey:
    project_id: int
    shape_id: str
    shape_pt_sequence: int


@dataclass(frozen=True)
class TransferKey:
    """Directional transfer identity: (project, from_stop_id, to_stop_id)"""

    project_id: int
    from_stop_id: str
    to_stop_id: str

    def reversed(self) -> "TransferKey":
        return TransferKey(self.project_id, self.to_stop_id, self.from_stop_id)

    @classmethod
    def of(cls, transfer) -> "TransferKey":
        """Build the key of a Transfer row or any object with the same attributes"""
        return cls(transfer.project_id, transfer.from_stop_id, transfer.to_stop_id)
