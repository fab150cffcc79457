"""
===============================================================================
USE CASE: Get Entity History (línea de tiempo de una entidad)
===============================================================================

Class:
    GetEntityHistoryUseCase

Responsibilities:
    - Devolver el historial de una entidad (más reciente primero) con el
      resumen legible de cada registro.
    - Exponer el último cambio de estado (vista de detalle de vehículo).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ....domain.audit import AuditRecord, EntityType
from ...historial_service import HistorialService


@dataclass(frozen=True)
class HistoryEntry:
    record: AuditRecord
    summary: str


@dataclass(frozen=True)
class EntityHistory:
    entity_id: str
    entity_type: EntityType
    entries: List[HistoryEntry] = field(default_factory=list)
    last_status_change: Optional[AuditRecord] = None


class GetEntityHistoryUseCase:
    def __init__(self, historial: HistorialService) -> None:
        self._historial = historial

    async def execute(
        self,
        entity_id: Any,
        entity_type: EntityType,
        *,
        limit: int | None = None,
    ) -> EntityHistory:
        records = await self._historial.entity_history(entity_id, entity_type, limit)
        last_change = next((r for r in records if r.is_status_change), None)
        if last_change is None and limit is not None:
            # la ventana pedida puede no incluirlo
            last_change = await self._historial.last_status_change(entity_id, entity_type)

        return EntityHistory(
            entity_id=str(entity_id),
            entity_type=entity_type,
            entries=[HistoryEntry(record=r, summary=r.summary()) for r in records],
            last_status_change=last_change,
        )
