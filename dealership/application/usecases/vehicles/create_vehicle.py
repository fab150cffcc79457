"""
===============================================================================
USE CASE: Create Vehicle
===============================================================================

Business Goal:
    Dar de alta un vehículo en el inventario y dejar constancia en el
    historial.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CreateVehicleUseCase

Responsibilities:
    - Construir el Vehicle (invariantes en la entidad).
    - Validar estado inicial (POR_INGRESAR | DISPONIBLE).
    - Garantizar matrícula única.
    - Persistir y registrar CREAR con un snapshot (best-effort).

Collaborators:
    - VehicleRepository: find_by_plate, save
    - HistorialService: record_creation
    - Clock / IdGenerator

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Un vehículo nuevo arranca en POR_INGRESAR o DISPONIBLE.
R2) La matrícula es única (pre-check + conflicto del store).
R3) favorite arranca en False.
R4) La auditoría no puede hacer fallar el alta.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ....domain.audit import EntityType
from ....domain.entities import Vehicle
from ....domain.errors import ConflictError
from ....domain.repositories import VehicleRepository
from ....domain.services import Clock, IdGenerator
from ....domain.vehicle_lifecycle import validate_creation_status
from ...historial_service import HistorialService, audit_best_effort

logger = logging.getLogger(__name__)


class CreateVehicleUseCase:
    def __init__(
        self,
        vehicle_repository: VehicleRepository,
        historial: HistorialService,
        *,
        clock: Clock,
        id_generator: IdGenerator,
    ) -> None:
        self._vehicles = vehicle_repository
        self._historial = historial
        self._clock = clock
        self._ids = id_generator

    async def execute(
        self, data: Mapping[str, Any], *, actor_id: str | None = None
    ) -> Vehicle:
        # ----- 1) Construir (valida invariantes) -----
        vehicle = Vehicle.create(
            id=self._ids.new_id(),
            by=actor_id,
            at=self._clock.now(),
            **dict(data),
        )
        validate_creation_status(vehicle.status)

        # ----- 2) Matrícula única -----
        if await self._vehicles.find_by_plate(vehicle.plate) is not None:
            raise ConflictError(
                f"A vehicle with plate '{vehicle.plate}' already exists.",
                fields=("plate",),
            )

        # ----- 3) Persistir -----
        saved = await self._vehicles.save(vehicle)
        logger.info(
            "Vehículo creado",
            extra={"vehicle_id": str(saved.id), "plate": saved.plate},
        )

        # ----- 4) Historial (best-effort) -----
        await audit_best_effort(
            self._historial.record_creation(
                saved.id,
                EntityType.VEHICLE,
                actor_id,
                metadata={"vehicle": saved.snapshot()},
                notes=f"Vehicle created: {saved.name} - {saved.plate}",
            ),
            operation="create_vehicle",
            entity_id=saved.id,
        )
        return saved
