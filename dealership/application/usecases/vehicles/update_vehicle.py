"""
===============================================================================
USE CASE: Update Vehicle (patch parcial + historial por campo)
===============================================================================

Business Goal:
    Aplicar un patch parcial sobre un vehículo y registrar UN registro de
    historial por cada campo efectivamente modificado.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    UpdateVehicleUseCase

Responsibilities:
    - Rechazar campos con workflow propio (status, favorite).
    - Calcular el diff en el orden fijo de campos.
    - Re-validar invariantes (update_with).
    - Validar unicidad de matrícula si cambia.
    - Persistir y registrar N cambios concurrentes (best-effort).

Collaborators:
    - VehicleRepository: find_by_id, find_by_plate, update
    - HistorialService: record_update
    - change_detection.diff

-------------------------------------------------------------------------------
FLOW
-------------------------------------------------------------------------------
1) Guard: status/favorite -> ValidationError.
2) Cargar vehículo; si no existe -> NotFoundError.
3) update_with(patch) (invariantes + claves desconocidas).
4) diff contra los valores ya normalizados.
5) Matrícula nueva -> chequeo de unicidad.
6) Persistir.
7) Historial: un ACTUALIZAR por campo, en paralelo.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from ....domain.audit import EntityType
from ....domain.change_detection import VEHICLE_DIFF_FIELDS, diff
from ....domain.entities import Vehicle
from ....domain.errors import ConflictError, NotFoundError, ValidationError
from ....domain.repositories import VehicleRepository
from ....domain.services import Clock
from ...historial_service import HistorialService, audit_all_best_effort
from .vehicle_results import UpdateVehicleResult

logger = logging.getLogger(__name__)

# Campos con workflow dedicado
_RESERVED_FIELDS = {
    "status": "Use the status change operation to modify 'status'.",
    "favorite": "Use the favorite operation to modify 'favorite'.",
}


class UpdateVehicleUseCase:
    def __init__(
        self,
        vehicle_repository: VehicleRepository,
        historial: HistorialService,
        *,
        clock: Clock,
    ) -> None:
        self._vehicles = vehicle_repository
        self._historial = historial
        self._clock = clock

    async def execute(
        self,
        vehicle_id: UUID,
        patch: Mapping[str, Any],
        *,
        actor_id: str | None = None,
    ) -> UpdateVehicleResult:
        # ----- 1) Guard de campos reservados -----
        for key, message in _RESERVED_FIELDS.items():
            if key in patch:
                raise ValidationError(message)

        # ----- 2) Cargar -----
        current = await self._vehicles.find_by_id(vehicle_id)
        if current is None:
            raise NotFoundError("Vehicle", vehicle_id)

        # ----- 3) Aplicar (re-valida invariantes) -----
        updated = current.update_with(patch, at=self._clock.now(), by=actor_id)

        # ----- 4) Diff sobre valores normalizados (enums, tuplas) -----
        normalized = {key: getattr(updated, key) for key in patch}
        changes = diff(current, normalized, VEHICLE_DIFF_FIELDS)

        # ----- 5) Unicidad de matrícula -----
        if any(change.field == "plate" for change in changes):
            await self._ensure_plate_available(updated)

        # ----- 6) Persistir -----
        saved = await self._vehicles.update(updated)
        logger.info(
            "Vehículo actualizado",
            extra={
                "vehicle_id": str(saved.id),
                "changed_fields": [c.field for c in changes],
            },
        )

        # ----- 7) Historial (N writes concurrentes, best-effort) -----
        metadata = {"vehicle": {"name": saved.name, "plate": saved.plate}}
        records = await audit_all_best_effort(
            (
                self._historial.record_update(
                    saved.id, EntityType.VEHICLE, change, actor_id, metadata=metadata
                )
                for change in changes
            ),
            operation="update_vehicle",
            entity_id=saved.id,
        )

        return UpdateVehicleResult(vehicle=saved, changes=changes, records=records)

    async def _ensure_plate_available(self, vehicle: Vehicle) -> None:
        existing = await self._vehicles.find_by_plate(vehicle.plate)
        if existing is not None and existing.id != vehicle.id:
            raise ConflictError(
                f"A vehicle with plate '{vehicle.plate}' already exists.",
                fields=("plate",),
            )
