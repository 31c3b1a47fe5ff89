from types import SimpleNamespace

from app.services.processors import deduplicate_stop_times


def visits(trip_id, pairs):
    return [{"trip_id": trip_id, "stop_sequence": seq, "stop_id": stop} for seq, stop in pairs]


def as_pairs(records):
    return [(r["stop_sequence"], r["stop_id"]) for r in records]


def test_consecutive_repeats_are_dropped_loops_kept():
    records = visits("T1", [(1, "A"), (2, "A"), (3, "B"), (4, "B"), (5, "A")])
    assert as_pairs(deduplicate_stop_times(records)) == [(1, "A"), (3, "B"), (5, "A")]


def test_input_order_does_not_matter():
    records = visits("T1", [(5, "A"), (3, "B"), (1, "A"), (4, "B"), (2, "A")])
    assert as_pairs(deduplicate_stop_times(records)) == [(1, "A"), (3, "B"), (5, "A")]


def test_idempotent():
    records = visits("T1", [(1, "A"), (2, "A"), (3, "B"), (4, "C"), (5, "C")])
    once = deduplicate_stop_times(records)
    assert deduplicate_stop_times(once) == once


def test_trips_are_processed_independently():
    records = visits("T1", [(1, "A"), (2, "B")]) + visits("T2", [(1, "B"), (2, "B"), (3, "A")])
    result = deduplicate_stop_times(records)
    assert [(r["trip_id"], r["stop_sequence"]) for r in result] == [
        ("T1", 1), ("T1", 2), ("T2", 1), ("T2", 3),
    ]


def test_attribute_records_are_supported():
    records = [
        SimpleNamespace(trip_id="T1", stop_sequence=0, stop_id="A"),
        SimpleNamespace(trip_id="T1", stop_sequence=1, stop_id="A"),
        SimpleNamespace(trip_id="T1", stop_sequence=2, stop_id="B"),
    ]
    result = deduplicate_stop_times(records)
    assert result == [records[0], records[2]]


def test_empty_input():
    assert deduplicate_stop_times([]) == []
