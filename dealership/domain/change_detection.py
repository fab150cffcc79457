"""
===============================================================================
TARJETA CRC — domain/change_detection.py
===============================================================================

Módulo:
    Detector de cambios campo a campo (entidad actual vs. patch)

Responsabilidades:
    - Comparar SOLO las claves presentes en el patch, en orden fijo.
    - Listas: comparación estructural y ordenada.
    - Serializar valores a texto estable para el historial (stringify).

Colaboradores:
    - application.usecases (update de vehículo / persona)
    - application.historial_service (un registro por FieldChange)
===============================================================================
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from .entities import VEHICLE_LIST_FIELDS

PROTECTED_VALUE = "[PROTEGIDO]"
UPDATED_VALUE = "[ACTUALIZADO]"

VEHICLE_DIFF_FIELDS: Tuple[str, ...] = (
    "name",
    "description",
    "notes",
    "plate",
    "make",
    "model",
    "version",
    "year",
    "mileage",
    "price",
    "cost",
    "transmission",
    "color",
) + VEHICLE_LIST_FIELDS

PERSON_DIFF_FIELDS: Tuple[str, ...] = ("name", "surname", "phone", "role")


@dataclass(frozen=True, slots=True)
class FieldChange:
    field: str
    before: Any
    after: Any


def _normalize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def _differs(before: Any, after: Any) -> bool:
    # list vs tuple con los mismos items en el mismo orden => sin cambio
    return _normalize(before) != _normalize(after)


def diff(
    before: Any,
    patch: Mapping[str, Any],
    fields: Sequence[str] = VEHICLE_DIFF_FIELDS,
) -> List[FieldChange]:
    """
    Lista de cambios para las claves del patch que difieren de `before`.

    El orden de salida sigue `fields`, no el del patch.
    """
    changes: List[FieldChange] = []
    for name in fields:
        if name not in patch:
            continue
        old = getattr(before, name)
        new = patch[name]
        if _differs(old, new):
            changes.append(FieldChange(name, old, new))
    return changes


def diff_person(before: Any, patch: Mapping[str, Any]) -> List[FieldChange]:
    """Igual que diff() + regla de password (nunca se expone el valor)."""
    changes = diff(before, patch, PERSON_DIFF_FIELDS)
    if patch.get("password"):
        changes.append(FieldChange("password", PROTECTED_VALUE, UPDATED_VALUE))
    return changes


def stringify(value: Any) -> str:
    """Texto estable para value_before / value_after."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(
            _jsonable(value), ensure_ascii=False, separators=(",", ":")
        )
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def changed_fields(changes: Iterable[FieldChange]) -> List[str]:
    return [c.field for c in changes]
