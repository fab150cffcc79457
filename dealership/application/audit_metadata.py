"""
===============================================================================
TARJETA CRC — application/audit_metadata.py
===============================================================================

Módulo:
    Esquemas de metadata del historial (pydantic)

Responsabilidades:
    - Fijar la forma de la metadata según action_kind.
    - Separar lo que agrega el recorder (timestamp, acción, campo, cambio)
      de lo que aporta el caller (siempre bajo `context`).
    - Sanitizar el contexto a valores serializables.

Colaboradores:
    - application.historial_service (único productor)
    - domain.audit.ActionKind
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.audit import ActionKind

OperationType = Literal["crud", "status_change"]


class AuditMetadata(BaseModel):
    """Campos comunes a todo registro."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    operation_type: OperationType = "crud"
    timestamp: datetime
    action: ActionKind
    field: Optional[str] = None
    context: dict[str, Any] = Field(default_factory=dict)


class CrudMetadata(AuditMetadata):
    operation_type: Literal["crud"] = "crud"
    change: Optional[str] = Field(
        default=None, description='"before -> after" si ambos valores existen'
    )


class StatusChangeMetadata(AuditMetadata):
    operation_type: Literal["status_change"] = "status_change"
    field: str
    transition: str = Field(description='"before -> after"')


def _sanitize(value: Any) -> Any:
    """
    Convierte valores a tipos serializables para JSON.
    - primitives -> OK
    - Enum -> value
    - dict/list/tuple -> recursivo
    - otros -> str(value)
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _sanitize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize(v) for v in value]
    return str(value)


def build_metadata(
    action_kind: ActionKind,
    *,
    timestamp: datetime,
    field: str | None = None,
    before: str | None = None,
    after: str | None = None,
    context: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Arma y valida la metadata para un registro; devuelve dict JSON-safe."""
    ctx = _sanitize(dict(context or {}))
    has_change = before is not None and after is not None

    model: AuditMetadata
    if action_kind is ActionKind.STATUS_CHANGE:
        model = StatusChangeMetadata(
            timestamp=timestamp,
            action=action_kind,
            field=field or "status",
            transition=f"{before} -> {after}",
            context=ctx,
        )
    else:
        model = CrudMetadata(
            timestamp=timestamp,
            action=action_kind,
            field=field,
            change=f"{before} -> {after}" if has_change else None,
            context=ctx,
        )

    return model.model_dump(mode="json")
