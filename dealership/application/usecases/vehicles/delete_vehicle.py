"""
===============================================================================
USE CASE: Delete / Restore Vehicle (soft delete)
===============================================================================

Business Goal:
    Sacar un vehículo del inventario activo sin borrarlo (active=False) y
    poder devolverlo (active=True), dejando constancia en el historial.

BUSINESS RULES:
    R1) Eliminar un vehículo ya eliminado es un error (no es idempotente).
    R2) Restaurar un vehículo activo es un error.
    R3) Notas por defecto: "Vehicle deleted|restored: <name> - <plate>".
===============================================================================
"""

from __future__ import annotations

import logging
from uuid import UUID

from ....domain.audit import EntityType
from ....domain.entities import Vehicle
from ....domain.errors import NotFoundError, ValidationError
from ....domain.repositories import VehicleRepository
from ...historial_service import HistorialService, audit_best_effort

logger = logging.getLogger(__name__)


class DeleteVehicleUseCase:
    def __init__(
        self, vehicle_repository: VehicleRepository, historial: HistorialService
    ) -> None:
        self._vehicles = vehicle_repository
        self._historial = historial

    async def execute(
        self,
        vehicle_id: UUID,
        *,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> Vehicle:
        vehicle = await _load(self._vehicles, vehicle_id)
        if not vehicle.active:
            raise ValidationError("Vehicle is already deleted.")

        deleted = await self._vehicles.soft_delete(vehicle.id, by=actor_id)
        logger.info("Vehículo eliminado", extra={"vehicle_id": str(vehicle.id)})

        await audit_best_effort(
            self._historial.record_deletion(
                deleted.id,
                EntityType.VEHICLE,
                actor_id,
                notes=notes or f"Vehicle deleted: {deleted.name} - {deleted.plate}",
                metadata={"vehicle": deleted.snapshot()},
            ),
            operation="delete_vehicle",
            entity_id=deleted.id,
        )
        return deleted


class RestoreVehicleUseCase:
    def __init__(
        self, vehicle_repository: VehicleRepository, historial: HistorialService
    ) -> None:
        self._vehicles = vehicle_repository
        self._historial = historial

    async def execute(
        self,
        vehicle_id: UUID,
        *,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> Vehicle:
        vehicle = await _load(self._vehicles, vehicle_id)
        if vehicle.active:
            raise ValidationError("Vehicle is already active.")

        restored = await self._vehicles.restore(vehicle.id, by=actor_id)
        logger.info("Vehículo restaurado", extra={"vehicle_id": str(vehicle.id)})

        await audit_best_effort(
            self._historial.record_restoration(
                restored.id,
                EntityType.VEHICLE,
                actor_id,
                notes=notes or f"Vehicle restored: {restored.name} - {restored.plate}",
                metadata={"vehicle": restored.snapshot()},
            ),
            operation="restore_vehicle",
            entity_id=restored.id,
        )
        return restored


async def _load(vehicles: VehicleRepository, vehicle_id: UUID) -> Vehicle:
    vehicle = await vehicles.find_by_id(vehicle_id)
    if vehicle is None:
        raise NotFoundError("Vehicle", vehicle_id)
    return vehicle
