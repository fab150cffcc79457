"""
===============================================================================
TARJETA CRC — domain/audit.py
===============================================================================

Módulo:
    Registro de historial (AuditRecord) + enums de tipo de entidad / acción

Responsabilidades:
    - Representar UN cambio auditable (inmutable, nunca se actualiza).
    - Validar invariantes (entity_id, enums, notas de cambio de estado).
    - Renderizar un resumen legible derivado SOLO de action_kind.

Colaboradores:
    - application.historial_service: construye y persiste registros.
    - domain.repositories.AuditRecordRepository: persistencia.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional
from uuid import UUID

from .entities import AuditFields, _LifecycleMixin, coerce_enum
from .errors import ValidationError


class EntityType(str, Enum):
    VEHICLE = "AUTO"
    PERSON = "USUARIO"


class ActionKind(str, Enum):
    CREATE = "CREAR"
    UPDATE = "ACTUALIZAR"
    DELETE = "ELIMINAR"
    RESTORE = "RESTAURAR"
    STATUS_CHANGE = "CAMBIO_ESTADO"


_ENTITY_LABELS: dict[EntityType, str] = {
    EntityType.VEHICLE: "Vehicle",
    EntityType.PERSON: "User",
}


@dataclass(frozen=True, slots=True)
class AuditRecord(_LifecycleMixin):
    """
    Entrada del historial.

    Invariantes:
      - entity_id no vacío
      - entity_type / action_kind pertenecen a sus enums
      - CAMBIO_ESTADO exige field_affected y notes no vacías
    """

    id: UUID
    entity_id: str
    entity_type: EntityType
    action_kind: ActionKind
    field_affected: Optional[str] = None
    value_before: Optional[str] = None
    value_after: Optional[str] = None
    notes: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    audit: AuditFields = field(default_factory=AuditFields)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entity_id", str(self.entity_id) if self.entity_id is not None else "")
        object.__setattr__(
            self, "entity_type", coerce_enum(EntityType, self.entity_type, "entity_type")
        )
        object.__setattr__(
            self, "action_kind", coerce_enum(ActionKind, self.action_kind, "action_kind")
        )
        # Vista de solo lectura: el registro nunca se modifica
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))

        if not self.entity_id.strip():
            raise ValidationError("Audit record requires an entity id.")
        if self.action_kind is ActionKind.STATUS_CHANGE:
            if not self.field_affected:
                raise ValidationError("Status change records require the affected field.")
            if not self.notes or not self.notes.strip():
                raise ValidationError("Status change records require notes.")

    @classmethod
    def new(
        cls,
        *,
        id: UUID,
        entity_id: str,
        entity_type: EntityType | str,
        action_kind: ActionKind | str,
        actor_id: str | None = None,
        at: datetime | None = None,
        field_affected: str | None = None,
        value_before: str | None = None,
        value_after: str | None = None,
        notes: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> "AuditRecord":
        return cls(
            id=id,
            entity_id=entity_id,
            entity_type=entity_type,
            action_kind=action_kind,
            field_affected=field_affected,
            value_before=value_before,
            value_after=value_after,
            notes=notes,
            metadata=metadata or {},
            audit=AuditFields.new(by=actor_id, at=at),
        )

    @property
    def is_status_change(self) -> bool:
        return self.action_kind is ActionKind.STATUS_CHANGE

    def summary(self) -> str:
        """Resumen de una línea (depende únicamente de action_kind)."""
        label = _ENTITY_LABELS[self.entity_type]

        if self.action_kind is ActionKind.STATUS_CHANGE:
            return f'Status changed from "{self.value_before}" to "{self.value_after}"'
        if self.action_kind is ActionKind.UPDATE:
            if self.field_affected:
                return f"Field '{self.field_affected}' updated"
            return f"{label} updated"
        if self.action_kind is ActionKind.CREATE:
            return f"{label} created"
        if self.action_kind is ActionKind.DELETE:
            return f"{label} deleted"
        return f"{label} restored"
