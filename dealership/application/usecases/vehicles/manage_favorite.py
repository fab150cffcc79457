"""
===============================================================================
USE CASE: Manage Favorite (marcar / desmarcar vehículo destacado)
===============================================================================

Class:
    ManageFavoriteUseCase

Responsibilities:
    - Verificar existencia y que el vehículo esté activo.
    - No-op si el flag ya tiene el valor pedido (sin write ni historial).
    - En false -> true, respetar el cupo global (max_slots).
    - Persistir y registrar UN ACTUALIZAR sobre `favorite` (best-effort).
    - Notas del caller si las hay; si no, texto por defecto.

Notas:
    - El conteo y el write no son atómicos: dos marcas simultáneas pueden
      superar el cupo por uno.
===============================================================================
"""

from __future__ import annotations

import logging
from uuid import UUID

from ....domain.audit import EntityType
from ....domain.change_detection import FieldChange
from ....domain.errors import NotFoundError, ValidationError
from ....domain.repositories import VehicleRepository
from ....domain.services import Clock
from ....domain.vehicle_lifecycle import DEFAULT_MAX_FAVORITE_SLOTS, ensure_favorite_slot
from ...historial_service import HistorialService, audit_best_effort
from .vehicle_results import FavoriteResult

logger = logging.getLogger(__name__)


class ManageFavoriteUseCase:
    def __init__(
        self,
        vehicle_repository: VehicleRepository,
        historial: HistorialService,
        *,
        clock: Clock,
        max_slots: int = DEFAULT_MAX_FAVORITE_SLOTS,
    ) -> None:
        self._vehicles = vehicle_repository
        self._historial = historial
        self._clock = clock
        self._max_slots = max_slots

    async def execute(
        self,
        vehicle_id: UUID,
        favorite: bool,
        *,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> FavoriteResult:
        vehicle = await self._vehicles.find_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle", vehicle_id)
        if not vehicle.active:
            raise ValidationError("Cannot manage favorites on a deleted vehicle.")

        if vehicle.favorite == favorite:
            return FavoriteResult(vehicle=vehicle, changed=False)

        if favorite:
            ensure_favorite_slot(await self._vehicles.count_favorites(), self._max_slots)

        updated = vehicle.update_with(
            {"favorite": favorite}, at=self._clock.now(), by=actor_id
        )
        saved = await self._vehicles.update(updated)
        logger.info(
            "Favorito actualizado",
            extra={"vehicle_id": str(saved.id), "favorite": favorite},
        )

        record = await audit_best_effort(
            self._historial.record_update(
                saved.id,
                EntityType.VEHICLE,
                FieldChange("favorite", vehicle.favorite, favorite),
                actor_id,
                notes=notes
                or (
                    "Vehicle marked as favorite"
                    if favorite
                    else "Vehicle removed from favorites"
                ),
                metadata={"vehicle": {"name": saved.name, "plate": saved.plate}},
            ),
            operation="manage_favorite",
            entity_id=saved.id,
        )

        return FavoriteResult(
            vehicle=saved,
            changed=True,
            record_id=record.id if record is not None else None,
        )
