import pytest

from app.core.exceptions import NotFoundError, OverlappingFrequencyError, ValidationFailedError
from app.services.frequency_service import FrequencyService


async def test_overlapping_window_rejected(repo):
    service = FrequencyService(repo)
    await service.create_frequency("T1", "06:00:00", "09:00:00", 600)

    with pytest.raises(OverlappingFrequencyError):
        await service.create_frequency("T1", "08:30:00", "10:00:00", 600)

    assert await repo.frequencies.count(trip_id="T1") == 1


async def test_adjacent_window_accepted(repo):
    service = FrequencyService(repo)
    await service.create_frequency("T1", "06:00:00", "09:00:00", 600)
    adjacent = await service.create_frequency("T1", "09:00:00", "10:00:00", 900)

    assert adjacent.id is not None
    assert [f.start_time for f in await service.list_frequencies_for_trip("T1")] == ["06:00:00", "09:00:00"]


async def test_windows_of_other_trips_do_not_conflict(repo):
    service = FrequencyService(repo)
    await service.create_frequency("T1", "06:00:00", "09:00:00", 600)
    await service.create_frequency("T2", "06:00:00", "09:00:00", 600)


async def test_overlap_compares_times_numerically(repo):
    service = FrequencyService(repo)
    await service.create_frequency("T1", "23:00:00", "25:30:00", 1200)

    with pytest.raises(OverlappingFrequencyError):
        await service.create_frequency("T1", "24:00:00", "26:00:00", 1200)


@pytest.mark.parametrize("start,end,headway,exact", [
    ("09:00:00", "09:00:00", 600, 0),
    ("10:00:00", "09:00:00", 600, 0),
    ("06:00:00", "09:00:00", 0, 0),
    ("06:00:00", "09:00:00", -60, 0),
    ("06:00:00", "09:00:00", 600, 2),
    ("6am", "09:00:00", 600, 0),
])
async def test_invalid_windows_rejected(repo, start, end, headway, exact):
    with pytest.raises(ValidationFailedError):
        await FrequencyService(repo).create_frequency("T1", start, end, headway, exact)


async def test_unknown_trip(repo):
    with pytest.raises(NotFoundError):
        await FrequencyService(repo).create_frequency("NOPE", "06:00:00", "09:00:00", 600)


async def test_update_excludes_the_record_itself(repo):
    service = FrequencyService(repo)
    first = await service.create_frequency("T1", "06:00:00", "09:00:00", 600)
    await service.create_frequency("T1", "10:00:00", "12:00:00", 600)

    updated = await service.update_frequency(first.id, {"end_time": "10:00:00", "headway_secs": 300})
    assert updated.end_time == "10:00:00"
    assert updated.headway_secs == 300

    with pytest.raises(OverlappingFrequencyError):
        await service.update_frequency(first.id, {"end_time": "11:00:00"})


async def test_update_and_delete_unknown(repo):
    service = FrequencyService(repo)
    with pytest.raises(NotFoundError):
        await service.update_frequency(999, {"headway_secs": 300})
    with pytest.raises(NotFoundError):
        await service.delete_frequency(999)


async def test_delete_frequency(repo):
    service = FrequencyService(repo)
    frequency = await service.create_frequency("T1", "06:00:00", "09:00:00", 600)
    await service.delete_frequency(frequency.id)
    assert await repo.frequencies.count() == 0


async def test_generate_default_frequencies_replaces_existing(repo):
    service = FrequencyService(repo)
    await service.create_frequency("T1", "20:00:00", "22:00:00", 1800)

    generated = await service.generate_default_frequencies("T1")

    assert [(f.start_time, f.end_time, f.headway_secs) for f in generated] == [
        ("06:00:00", "09:00:00", 600),
        ("09:00:00", "16:00:00", 900),
        ("16:00:00", "19:00:00", 600),
    ]
    assert all(f.exact_times == 0 for f in generated)
    assert len(await service.list_frequencies_for_trip("T1")) == 3


async def test_frequencies_are_project_scoped(repo, other_repo):
    await FrequencyService(repo).create_frequency("T1", "06:00:00", "09:00:00", 600)
    # Same trip_id in another project has its own windows
    await FrequencyService(other_repo).create_frequency("T1", "06:00:00", "09:00:00", 600)
    with pytest.raises(NotFoundError):
        await FrequencyService(other_repo).update_frequency(1, {"headway_secs": 60})
