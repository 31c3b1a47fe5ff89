"""
Transfer service.

Manages directional transfer rules between stops and derives walking
transfers for stops that lie close to each other.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import Request
from sqlalchemy import or_

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationFailedError, ConflictError
from app.models.audit import AuditAction
from app.models.gtfs import Stop, Transfer
from app.models.keys import TransferKey
from app.repositories.transit import TransitRepository
from app.services.geodesy import haversine_distance, get_pair_strategy
from app.utils.audit import create_audit_log, serialize_model

logger = logging.getLogger(__name__)

TRANSFER_INDEX_ELEMENTS = ["project_id", "from_stop_id", "to_stop_id"]


@dataclass
class TransferGenerationOptions:
    """Distance threshold and attributes of generated transfers"""

    max_distance_meters: float = settings.TRANSFER_MAX_DISTANCE_METERS
    default_transfer_type: int = settings.TRANSFER_DEFAULT_TYPE
    default_min_transfer_time: Optional[int] = settings.TRANSFER_DEFAULT_MIN_TIME


@dataclass
class TransferGenerationResult:
    generated: int
    pairs_in_range: int
    transfers: List[Transfer]


def _validate_transfer_type(transfer_type: Any) -> None:
    if transfer_type not in (0, 1, 2, 3):
        raise ValidationFailedError("transfer_type must be between 0 and 3")


def _validate_min_transfer_time(min_transfer_time: Any) -> None:
    if min_transfer_time is not None and min_transfer_time < 0:
        raise ValidationFailedError("min_transfer_time must not be negative")


class TransferService:
    """Transfer rule management for one project"""

    def __init__(self, repo: TransitRepository, pair_strategy: Optional[str] = None):
        self.repo = repo
        self.pair_strategy = get_pair_strategy(pair_strategy or settings.TRANSFER_PAIR_STRATEGY)

    async def _get_transfer(self, transfer_id: int) -> Transfer:
        transfer = await self.repo.transfers.get(id=transfer_id)
        if not transfer:
            raise NotFoundError(f"Transfer {transfer_id} not found in this project")
        return transfer

    async def _existing_keys(self) -> set[TransferKey]:
        return {TransferKey.of(transfer) for transfer in await self.repo.transfers.find_many()}

    async def generate_transfers_for_nearby_stops(
        self,
        options: Optional[TransferGenerationOptions] = None,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> TransferGenerationResult:
        """
        Create transfers in both directions between every pair of stops within
        ``max_distance_meters`` of each other.

        Pairs where either direction already has a transfer are left alone, so
        running the generation again inserts nothing.
        """
        options = options or TransferGenerationOptions()
        if options.max_distance_meters < 0:
            raise ValidationFailedError("max_distance_meters must not be negative")
        _validate_transfer_type(options.default_transfer_type)
        _validate_min_transfer_time(options.default_min_transfer_time)

        stops = await self.repo.stops.find_many(order_by=[Stop.stop_id])
        points = [(float(stop.stop_lat), float(stop.stop_lon)) for stop in stops]
        existing = await self._existing_keys()

        pairs_in_range = 0
        new_keys: List[TransferKey] = []
        for i, j in self.pair_strategy.candidate_pairs(points, options.max_distance_meters):
            distance = haversine_distance(points[i][0], points[i][1], points[j][0], points[j][1])
            if distance > options.max_distance_meters:
                continue
            pairs_in_range += 1

            key = TransferKey(self.repo.project_id, stops[i].stop_id, stops[j].stop_id)
            if key in existing or key.reversed() in existing:
                continue
            new_keys.extend([key, key.reversed()])

        rows = [
            {
                "from_stop_id": key.from_stop_id,
                "to_stop_id": key.to_stop_id,
                "transfer_type": options.default_transfer_type,
                "min_transfer_time": options.default_min_transfer_time,
                "created_by": actor_id,
            }
            for key in new_keys
        ]

        try:
            before = await self.repo.transfers.count()
            await self.repo.transfers.insert_ignoring_conflicts(rows, TRANSFER_INDEX_ELEMENTS)
            generated = await self.repo.transfers.count() - before

            if generated:
                await create_audit_log(
                    db=self.repo.db,
                    action=AuditAction.GENERATE,
                    entity_type="transfer",
                    entity_id=str(self.repo.project_id),
                    description=f"Generated {generated} transfers between nearby stops",
                    new_values={
                        "max_distance_meters": options.max_distance_meters,
                        "pairs_in_range": pairs_in_range,
                        "generated": generated,
                    },
                    project_id=self.repo.project_id,
                    actor_id=actor_id,
                    request=request,
                )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        wanted = set(new_keys)
        transfers = [
            transfer
            for transfer in await self.repo.transfers.find_many(order_by=[Transfer.id])
            if TransferKey.of(transfer) in wanted
        ]

        logger.info(
            f"Transfer generation for project {self.repo.project_id}: {len(stops)} stops, "
            f"{pairs_in_range} pairs within {options.max_distance_meters}m, {generated} rows inserted "
            f"({self.pair_strategy.name} scan)"
        )
        return TransferGenerationResult(
            generated=generated,
            pairs_in_range=pairs_in_range,
            transfers=transfers,
        )

    async def create_transfer(
        self,
        from_stop_id: str,
        to_stop_id: str,
        transfer_type: int = 0,
        min_transfer_time: Optional[int] = None,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> Transfer:
        if from_stop_id == to_stop_id:
            raise ValidationFailedError("from_stop_id and to_stop_id must differ")
        _validate_transfer_type(transfer_type)
        _validate_min_transfer_time(min_transfer_time)

        for stop_id in (from_stop_id, to_stop_id):
            if not await self.repo.stops.get(stop_id=stop_id):
                raise NotFoundError(f"Stop '{stop_id}' not found in this project")

        if await self.repo.transfers.get(from_stop_id=from_stop_id, to_stop_id=to_stop_id):
            logger.warning(f"Rejected duplicate transfer {from_stop_id} -> {to_stop_id}")
            raise ConflictError(f"Transfer from '{from_stop_id}' to '{to_stop_id}' already exists")

        try:
            transfer = await self.repo.transfers.add(
                from_stop_id=from_stop_id,
                to_stop_id=to_stop_id,
                transfer_type=transfer_type,
                min_transfer_time=min_transfer_time,
                created_by=actor_id,
            )
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.CREATE,
                entity_type="transfer",
                entity_id=str(transfer.id),
                description=f"Created transfer {from_stop_id} -> {to_stop_id}",
                new_values=serialize_model(transfer),
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        return transfer

    async def update_transfer(
        self,
        transfer_id: int,
        changes: Dict[str, Any],
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> Transfer:
        transfer = await self._get_transfer(transfer_id)

        if changes.get("transfer_type") is not None:
            _validate_transfer_type(changes["transfer_type"])
        if "min_transfer_time" in changes:
            _validate_min_transfer_time(changes["min_transfer_time"])

        old_values = serialize_model(transfer)
        try:
            if changes.get("transfer_type") is not None:
                transfer.transfer_type = changes["transfer_type"]
            if "min_transfer_time" in changes:
                transfer.min_transfer_time = changes["min_transfer_time"]
            await self.repo.db.flush()
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.UPDATE,
                entity_type="transfer",
                entity_id=str(transfer.id),
                description=f"Updated transfer {transfer.from_stop_id} -> {transfer.to_stop_id}",
                old_values=old_values,
                new_values=serialize_model(transfer),
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        return transfer

    async def delete_transfer(
        self,
        transfer_id: int,
        actor_id: Optional[int] = None,
        request: Optional[Request] = None,
    ) -> None:
        transfer = await self._get_transfer(transfer_id)
        old_values = serialize_model(transfer)

        try:
            await self.repo.transfers.delete_many(id=transfer_id)
            await create_audit_log(
                db=self.repo.db,
                action=AuditAction.DELETE,
                entity_type="transfer",
                entity_id=str(transfer_id),
                description=f"Deleted transfer {old_values['from_stop_id']} -> {old_values['to_stop_id']}",
                old_values=old_values,
                project_id=self.repo.project_id,
                actor_id=actor_id,
                request=request,
            )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

    async def get_transfers_for_stop(self, stop_id: str) -> Dict[str, List[Transfer]]:
        """Transfers leaving from and arriving at a stop"""
        if not await self.repo.stops.get(stop_id=stop_id):
            raise NotFoundError(f"Stop '{stop_id}' not found in this project")

        transfers = await self.repo.transfers.find_many(
            or_(Transfer.from_stop_id == stop_id, Transfer.to_stop_id == stop_id),
            order_by=[Transfer.id],
        )
        return {
            "outgoing": [t for t in transfers if t.from_stop_id == stop_id],
            "incoming": [t for t in transfers if t.to_stop_id == stop_id],
        }
