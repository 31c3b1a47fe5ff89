"""Row-level processors for stop time data"""

from collections import defaultdict
from typing import Any, Iterable, List, TypeVar

RecordT = TypeVar("RecordT")


def _field(record: Any, name: str) -> Any:
    """Read a field from a mapping or an attribute-style record (ORM row, schema)"""
    if isinstance(record, dict):
        return record[name]
    return getattr(record, name)


def deduplicate_stop_times(records: Iterable[RecordT]) -> List[RecordT]:
    """
    Remove consecutive duplicate stop visits within each trip.

    Records are grouped by trip_id and sorted by stop_sequence. The first record
    of a trip is always kept; a later record is kept only when its stop_id
    differs from the last kept record. A stop visited again after other stops
    (a loop) is preserved.

    Trips appear in the output in the order they are first seen; the records
    themselves are returned unchanged.
    """
    trips: dict[Any, List[RecordT]] = defaultdict(list)
    for record in records:
        trips[_field(record, "trip_id")].append(record)

    cleaned: List[RecordT] = []
    for stops in trips.values():
        stops.sort(key=lambda r: _field(r, "stop_sequence"))

        last_stop_id = None
        for index, record in enumerate(stops):
            stop_id = _field(record, "stop_id")
            if index == 0 or stop_id != last_stop_id:
                cleaned.append(record)
                last_stop_id = stop_id

    return cleaned
