"""
===============================================================================
USE CASE: Change Vehicle Status
===============================================================================

Business Goal:
    Mover un vehículo por su ciclo de vida (POR_INGRESAR -> DISPONIBLE ->
    RESERVADO -> VENDIDO) respetando la tabla de transiciones.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    ChangeVehicleStatusUseCase

Responsibilities:
    - Verificar que el vehículo exista y esté activo.
    - Validar la transición (vehicle_lifecycle.validate_transition).
    - Limpiar favorite cuando el destino lo exige (VENDIDO / RESERVADO).
    - Persistir y registrar UN CAMBIO_ESTADO (best-effort).

Collaborators:
    - VehicleRepository: find_by_id, update
    - HistorialService: record_status_change
    - vehicle_lifecycle: validate_transition, clears_favorite

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Un vehículo eliminado no cambia de estado.
R2) VENDIDO es terminal; pedir el mismo estado se rechaza.
R3) Vendido/reservado deja de ser favorito (mismo write, mismo registro).
R4) Notas por defecto si el caller no aporta.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from ....domain.audit import EntityType
from ....domain.entities import VehicleStatus, coerce_enum
from ....domain.errors import NotFoundError, ValidationError
from ....domain.repositories import VehicleRepository
from ....domain.services import Clock
from ....domain.vehicle_lifecycle import clears_favorite, validate_transition
from ...historial_service import HistorialService, audit_best_effort
from .vehicle_results import StatusChangeResult

logger = logging.getLogger(__name__)


class ChangeVehicleStatusUseCase:
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
        requested: VehicleStatus | str,
        *,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> StatusChangeResult:
        requested_status: VehicleStatus = coerce_enum(VehicleStatus, requested, "status")

        # ----- 1) Cargar + activo -----
        vehicle = await self._vehicles.find_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle", vehicle_id)
        if not vehicle.active:
            raise ValidationError("Cannot change the status of a deleted vehicle.")

        previous = vehicle.status

        # ----- 2) Máquina de estados -----
        validate_transition(previous, requested_status)

        # ----- 3) Patch (status + favorite si corresponde) -----
        patch: dict[str, Any] = {"status": requested_status}
        favorite_cleared = vehicle.favorite and clears_favorite(requested_status)
        if favorite_cleared:
            patch["favorite"] = False

        updated = vehicle.update_with(patch, at=self._clock.now(), by=actor_id)
        saved = await self._vehicles.update(updated)

        message = self._message(previous, requested_status, favorite_cleared)
        logger.info(
            "Estado de vehículo cambiado",
            extra={
                "vehicle_id": str(saved.id),
                "from": previous.value,
                "to": requested_status.value,
                "favorite_cleared": favorite_cleared,
            },
        )

        # ----- 4) Historial (best-effort) -----
        record = await audit_best_effort(
            self._historial.record_status_change(
                saved.id,
                EntityType.VEHICLE,
                field_affected="status",
                before=previous,
                after=requested_status,
                notes=notes or message,
                actor_id=actor_id,
                metadata={
                    "vehicle": {
                        "name": saved.name,
                        "plate": saved.plate,
                        "make": saved.make,
                        "model": saved.model,
                    },
                    "favorite_cleared": favorite_cleared,
                },
            ),
            operation="change_vehicle_status",
            entity_id=saved.id,
        )

        return StatusChangeResult(
            vehicle=saved,
            previous_status=previous,
            new_status=requested_status,
            favorite_cleared=favorite_cleared,
            record_id=record.id if record is not None else None,
            message=message,
        )

    @staticmethod
    def _message(
        previous: VehicleStatus, new: VehicleStatus, favorite_cleared: bool
    ) -> str:
        message = f"Status changed from {previous.value} to {new.value}"
        if favorite_cleared:
            message += " (removed from favorites)"
        return message
