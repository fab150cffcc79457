"""
===============================================================================
VEHICLE USE CASES — Results (DTOs de salida)
===============================================================================

Resultados tipados e inmutables de los workflows de vehículos.

Notas:
  - Los errores NO viajan en el resultado: se propagan como excepciones
    tipadas (domain.errors).
  - record_id / records quedan vacíos si la auditoría best-effort falló.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from ....domain.audit import AuditRecord
from ....domain.change_detection import FieldChange
from ....domain.entities import Vehicle, VehicleStatus


@dataclass(frozen=True)
class UpdateVehicleResult:
    vehicle: Vehicle
    changes: List[FieldChange] = field(default_factory=list)
    records: List[AuditRecord] = field(default_factory=list)


@dataclass(frozen=True)
class StatusChangeResult:
    vehicle: Vehicle
    previous_status: VehicleStatus
    new_status: VehicleStatus
    favorite_cleared: bool
    record_id: Optional[UUID]
    message: str


@dataclass(frozen=True)
class FavoriteResult:
    vehicle: Vehicle
    changed: bool
    record_id: Optional[UUID] = None
