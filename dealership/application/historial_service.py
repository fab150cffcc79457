"""
===============================================================================
TARJETA CRC — application/historial_service.py (Historial / Auditoría)
===============================================================================

Responsabilidades:
  - Construir registros de historial con formato consistente
    (entidad / acción / campo / antes / después / notas / metadata).
  - Enriquecer la metadata (timestamp del reloj inyectado, tipo de operación,
    transición "antes -> después") con un esquema fijo por acción.
  - Persistir vía AuditRecordRepository (puerto del dominio).
  - Consultar la línea de tiempo de una entidad.

Colaboradores:
  - domain.audit.AuditRecord / ActionKind / EntityType
  - domain.repositories.AuditRecordRepository
  - domain.change_detection.FieldChange / stringify
  - application.audit_metadata.build_metadata
  - crosscutting.logger.logger

Patrones aplicados:
  - Service (fachada sobre el repositorio de historial)
  - Best-effort en los workflows: audit_best_effort / audit_all_best_effort

Reglas:
  - El servicio NO se traga errores: valida y propaga.
  - Quien decide que la auditoría es best-effort es el workflow, envolviendo
    la llamada. No hay transacción entre el write de la entidad y el del
    historial: si el segundo falla, la entidad queda escrita sin registro.
===============================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Awaitable, Iterable, List, Mapping, Optional, TypeVar

from ..crosscutting.logger import logger
from ..crosscutting.pagination import Page, build_page
from ..domain.audit import ActionKind, AuditRecord, EntityType
from ..domain.change_detection import FieldChange, stringify
from ..domain.repositories import AuditRecordFilters, AuditRecordRepository
from ..domain.services import Clock, IdGenerator
from .audit_metadata import build_metadata

R = TypeVar("R")


def _text(value: Any) -> Optional[str]:
    return None if value is None else stringify(value)


class HistorialService:
    """
    Recorder del historial.

    Todos los métodos de escritura devuelven el AuditRecord persistido.
    """

    def __init__(
        self,
        repository: AuditRecordRepository,
        *,
        clock: Clock,
        id_generator: IdGenerator,
    ):
        self._repository = repository
        self._clock = clock
        self._ids = id_generator

    # =========================================================================
    # Escritura
    # =========================================================================

    async def record(
        self,
        entity_id: Any,
        entity_type: EntityType | str,
        action_kind: ActionKind | str,
        *,
        actor_id: str | None = None,
        field_affected: str | None = None,
        before: Any = None,
        after: Any = None,
        notes: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditRecord:
        now = self._clock.now()
        value_before = _text(before)
        value_after = _text(after)

        # ----- 1) Validar (construcción del registro) -----
        record = AuditRecord.new(
            id=self._ids.new_id(),
            entity_id=str(entity_id) if entity_id is not None else "",
            entity_type=entity_type,
            action_kind=action_kind,
            actor_id=actor_id,
            at=now,
            field_affected=field_affected,
            value_before=value_before,
            value_after=value_after,
            notes=notes,
        )

        # ----- 2) Enriquecer metadata con el esquema de la acción -----
        enriched = build_metadata(
            record.action_kind,
            timestamp=now,
            field=field_affected,
            before=value_before,
            after=value_after,
            context=metadata,
        )
        record = replace(record, metadata=enriched)

        # ----- 3) Persistir -----
        saved = await self._repository.save(record)
        logger.debug(
            "Historial registrado",
            extra={
                "entity_id": saved.entity_id,
                "entity_type": saved.entity_type.value,
                "action_kind": saved.action_kind.value,
                "field_affected": saved.field_affected,
            },
        )
        return saved

    async def record_creation(
        self,
        entity_id: Any,
        entity_type: EntityType,
        actor_id: str | None = None,
        metadata: Mapping[str, Any] | None = None,
        notes: str | None = None,
    ) -> AuditRecord:
        return await self.record(
            entity_id,
            entity_type,
            ActionKind.CREATE,
            actor_id=actor_id,
            notes=notes,
            metadata=metadata,
        )

    async def record_update(
        self,
        entity_id: Any,
        entity_type: EntityType,
        change: FieldChange,
        actor_id: str | None = None,
        notes: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditRecord:
        return await self.record(
            entity_id,
            entity_type,
            ActionKind.UPDATE,
            actor_id=actor_id,
            field_affected=change.field,
            # stringify(None) => "null": un campo que pasa de vacío a valor
            # conserva ambos lados en el registro
            before=stringify(change.before),
            after=stringify(change.after),
            notes=notes or f"Field '{change.field}' updated",
            metadata=metadata,
        )

    async def record_deletion(
        self,
        entity_id: Any,
        entity_type: EntityType,
        actor_id: str | None = None,
        notes: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditRecord:
        return await self.record(
            entity_id,
            entity_type,
            ActionKind.DELETE,
            actor_id=actor_id,
            notes=notes,
            metadata=metadata,
        )

    async def record_restoration(
        self,
        entity_id: Any,
        entity_type: EntityType,
        actor_id: str | None = None,
        notes: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditRecord:
        return await self.record(
            entity_id,
            entity_type,
            ActionKind.RESTORE,
            actor_id=actor_id,
            notes=notes,
            metadata=metadata,
        )

    async def record_status_change(
        self,
        entity_id: Any,
        entity_type: EntityType,
        *,
        field_affected: str,
        before: Any,
        after: Any,
        notes: str,
        actor_id: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditRecord:
        return await self.record(
            entity_id,
            entity_type,
            ActionKind.STATUS_CHANGE,
            actor_id=actor_id,
            field_affected=field_affected,
            before=before,
            after=after,
            notes=notes,
            metadata=metadata,
        )

    async def record_field_changes(
        self,
        entity_id: Any,
        entity_type: EntityType,
        changes: Iterable[FieldChange],
        actor_id: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> List[AuditRecord]:
        """N registros ACTUALIZAR concurrentes (uno por campo), en orden."""
        return list(
            await asyncio.gather(
                *(
                    self.record_update(
                        entity_id, entity_type, change, actor_id, metadata=metadata
                    )
                    for change in changes
                )
            )
        )

    # =========================================================================
    # Consultas
    # =========================================================================

    async def entity_history(
        self,
        entity_id: Any,
        entity_type: EntityType,
        limit: int | None = None,
    ) -> List[AuditRecord]:
        """Historial de una entidad, más reciente primero."""
        return await self._repository.find_by_entity(
            str(entity_id), entity_type, limit=limit
        )

    async def status_changes(
        self, entity_id: Any, entity_type: EntityType
    ) -> List[AuditRecord]:
        return await self._repository.find_by_entity(
            str(entity_id), entity_type, action_kind=ActionKind.STATUS_CHANGE
        )

    async def last_status_change(
        self, entity_id: Any, entity_type: EntityType
    ) -> Optional[AuditRecord]:
        records = await self._repository.find_by_entity(
            str(entity_id),
            entity_type,
            action_kind=ActionKind.STATUS_CHANGE,
            limit=1,
        )
        return records[0] if records else None

    async def paginate(
        self,
        page: int,
        limit: int,
        filters: AuditRecordFilters | None = None,
    ) -> Page[AuditRecord]:
        result = await self._repository.find_with_pagination(
            page, limit, filters, "created_at", "desc"
        )
        return build_page(result.data, page=page, limit=limit, total=result.total)


# =============================================================================
# Best-effort (lo usan los workflows)
# =============================================================================


async def audit_best_effort(
    write: Awaitable[R], *, operation: str, entity_id: Any = None
) -> Optional[R]:
    """
    Espera una escritura de historial; si falla, loguea y devuelve None.

    Regla clave:
      - La falla de auditoría NUNCA hace fallar el workflow.
    """
    try:
        return await write
    except Exception:
        logger.exception(
            "Falló la escritura del historial",
            extra={"operation": operation, "entity_id": str(entity_id)},
        )
        return None


async def audit_all_best_effort(
    writes: Iterable[Awaitable[R]], *, operation: str, entity_id: Any = None
) -> List[R]:
    """
    Lanza N escrituras concurrentes y devuelve solo las exitosas.

    Cada falla se loguea por separado; el resto sigue su curso.
    """
    results = await asyncio.gather(*writes, return_exceptions=True)
    written: List[R] = []
    for result in results:
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error(
                "Falló la escritura del historial",
                exc_info=(type(result), result, result.__traceback__),
                extra={"operation": operation, "entity_id": str(entity_id)},
            )
            continue
        written.append(result)
    return written
