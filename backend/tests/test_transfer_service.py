import pytest
from sqlalchemy.sql.dml import Insert

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from app.models.keys import TransferKey
from app.services.transfer_service import TransferService, TransferGenerationOptions


@pytest.mark.parametrize("strategy", ["pairwise", "grid"])
async def test_generation_creates_both_directions(repo, strategy):
    result = await TransferService(repo, pair_strategy=strategy).generate_transfers_for_nearby_stops()

    assert result.pairs_in_range == 2
    assert result.generated == 4
    keys = {(t.from_stop_id, t.to_stop_id) for t in result.transfers}
    assert keys == {("S1", "S2"), ("S2", "S1"), ("S3", "S4"), ("S4", "S3")}
    assert all(t.transfer_type == 2 and t.min_transfer_time == 300 for t in result.transfers)


async def test_generation_is_idempotent(repo):
    service = TransferService(repo)
    await service.generate_transfers_for_nearby_stops()
    second = await service.generate_transfers_for_nearby_stops()

    assert second.generated == 0
    assert second.transfers == []
    assert await repo.transfers.count() == 2 * second.pairs_in_range


async def test_generation_inserts_in_chunks(repo, monkeypatch):
    monkeypatch.setattr(settings, "BULK_INSERT_CHUNK_SIZE", 3)
    inserts = []
    execute = repo.db.execute

    async def counting_execute(statement, *args, **kwargs):
        if isinstance(statement, Insert):
            inserts.append(statement)
        return await execute(statement, *args, **kwargs)

    monkeypatch.setattr(repo.db, "execute", counting_execute)

    result = await TransferService(repo).generate_transfers_for_nearby_stops()

    assert len(inserts) == 2
    assert result.generated == 4
    assert await repo.transfers.count() == 4


async def test_existing_direction_blocks_the_pair(repo):
    service = TransferService(repo)
    await service.create_transfer("S2", "S1", transfer_type=0)

    result = await service.generate_transfers_for_nearby_stops()

    assert result.generated == 2
    assert {(t.from_stop_id, t.to_stop_id) for t in result.transfers} == {("S3", "S4"), ("S4", "S3")}
    assert await repo.transfers.count() == 3


async def test_threshold_and_defaults_are_configurable(repo):
    options = TransferGenerationOptions(max_distance_meters=2000, default_transfer_type=0, default_min_transfer_time=None)
    result = await TransferService(repo).generate_transfers_for_nearby_stops(options)

    # Every pair of the four stops is within 2 km
    assert result.pairs_in_range == 6
    assert result.generated == 12
    assert all(t.transfer_type == 0 and t.min_transfer_time is None for t in result.transfers)


async def test_generation_is_project_scoped(repo, other_repo):
    await TransferService(other_repo).generate_transfers_for_nearby_stops()
    result = await TransferService(repo).generate_transfers_for_nearby_stops()

    assert result.generated == 4
    assert await other_repo.transfers.count() == 2


async def test_existing_keys_use_transfer_key(repo):
    transfer = await TransferService(repo).create_transfer("S1", "S2")
    key = TransferKey.of(transfer)
    assert key == TransferKey(repo.project_id, "S1", "S2")
    assert key.reversed() == TransferKey(repo.project_id, "S2", "S1")


async def test_create_transfer_validation(repo):
    service = TransferService(repo)
    with pytest.raises(ValidationFailedError):
        await service.create_transfer("S1", "S1")
    with pytest.raises(ValidationFailedError):
        await service.create_transfer("S1", "S2", transfer_type=4)
    with pytest.raises(NotFoundError):
        await service.create_transfer("S1", "GHOST")

    await service.create_transfer("S1", "S2")
    with pytest.raises(ConflictError):
        await service.create_transfer("S1", "S2")


async def test_update_and_delete_transfer(repo):
    service = TransferService(repo)
    transfer = await service.create_transfer("S1", "S2", transfer_type=2, min_transfer_time=120)

    updated = await service.update_transfer(transfer.id, {"transfer_type": 1, "min_transfer_time": None})
    assert updated.transfer_type == 1
    assert updated.min_transfer_time is None

    with pytest.raises(ValidationFailedError):
        await service.update_transfer(transfer.id, {"transfer_type": 7})

    await service.delete_transfer(transfer.id)
    with pytest.raises(NotFoundError):
        await service.delete_transfer(transfer.id)


async def test_transfers_for_stop(repo):
    service = TransferService(repo)
    await service.create_transfer("S1", "S2")
    await service.create_transfer("S3", "S1")

    transfers = await service.get_transfers_for_stop("S1")
    assert [t.to_stop_id for t in transfers["outgoing"]] == ["S2"]
    assert [t.from_stop_id for t in transfers["incoming"]] == ["S3"]

    with pytest.raises(NotFoundError):
        await service.get_transfers_for_stop("GHOST")
