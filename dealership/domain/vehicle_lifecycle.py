"""
===============================================================================
TARJETA CRC — domain/vehicle_lifecycle.py
===============================================================================

Módulo:
    Máquina de estados del vehículo + limitador de favoritos

Responsabilidades:
    - Tabla de transiciones fija (POR_INGRESAR -> DISPONIBLE -> ...).
    - Validar una transición pedida con chequeos en orden estricto.
    - Decidir si una transición limpia el flag de favorito.
    - Acotar la cantidad global de favoritos.

Colaboradores:
    - application.usecases.vehicles (cambio de estado, alta, favoritos)
    - domain.errors (errores de transición / capacidad)

Reglas:
    1) VENDIDO es terminal.
    2) Pedir el mismo estado es un no-op rechazado.
    3) POR_INGRESAR nunca es destino.
    4) El destino debe figurar en la tabla para el estado actual.
===============================================================================
"""

from __future__ import annotations

from typing import FrozenSet, Mapping

from .entities import VehicleStatus
from .errors import (
    CapacityExceededError,
    DisallowedTargetError,
    InvalidTransitionError,
    NoOpTransitionError,
    TerminalStateError,
    ValidationError,
)

DEFAULT_MAX_FAVORITE_SLOTS = 6

TRANSITIONS: Mapping[VehicleStatus, FrozenSet[VehicleStatus]] = {
    VehicleStatus.TO_BE_INTAKEN: frozenset(
        {VehicleStatus.AVAILABLE, VehicleStatus.RESERVED, VehicleStatus.SOLD}
    ),
    VehicleStatus.AVAILABLE: frozenset({VehicleStatus.RESERVED, VehicleStatus.SOLD}),
    VehicleStatus.RESERVED: frozenset({VehicleStatus.AVAILABLE, VehicleStatus.SOLD}),
    VehicleStatus.SOLD: frozenset(),
}

# Destinos que un usuario puede pedir (POR_INGRESAR solo existe al alta)
SELECTABLE_TARGETS: FrozenSet[VehicleStatus] = frozenset(
    {VehicleStatus.AVAILABLE, VehicleStatus.RESERVED, VehicleStatus.SOLD}
)

CREATION_STATUSES: FrozenSet[VehicleStatus] = frozenset(
    {VehicleStatus.TO_BE_INTAKEN, VehicleStatus.AVAILABLE}
)

_FAVORITE_CLEARING: FrozenSet[VehicleStatus] = frozenset(
    {VehicleStatus.SOLD, VehicleStatus.RESERVED}
)

# Orden estable para mensajes
_ORDER = list(VehicleStatus)


def valid_targets(status: VehicleStatus) -> FrozenSet[VehicleStatus]:
    return TRANSITIONS.get(status, frozenset())


def _ordered(targets: FrozenSet[VehicleStatus]) -> list[VehicleStatus]:
    return sorted(targets, key=_ORDER.index)


def _describe(targets: FrozenSet[VehicleStatus]) -> str:
    if not targets:
        return "none"
    return ", ".join(s.value for s in _ordered(targets))


def validate_transition(current: VehicleStatus, requested: VehicleStatus) -> None:
    """
    Valida current -> requested.

    Raises:
        TerminalStateError, NoOpTransitionError, DisallowedTargetError,
        InvalidTransitionError (en ese orden de chequeo).
    """
    targets = valid_targets(current)

    if current is VehicleStatus.SOLD:
        raise TerminalStateError(
            f"Vehicle is {current.value}; its status can no longer change.",
            current=current,
            requested=requested,
        )

    if requested == current:
        raise NoOpTransitionError(
            f"Vehicle is already {current.value}. Valid targets: {_describe(targets)}.",
            current=current,
            requested=requested,
            valid_targets=_ordered(targets),
        )

    if requested not in SELECTABLE_TARGETS:
        raise DisallowedTargetError(
            f"Status {requested.value} cannot be requested. "
            f"Valid targets: {_describe(targets)}.",
            current=current,
            requested=requested,
            valid_targets=_ordered(targets),
        )

    if requested not in targets:
        raise InvalidTransitionError(
            f"Cannot change status from {current.value} to {requested.value}. "
            f"Valid targets: {_describe(targets)}.",
            current=current,
            requested=requested,
            valid_targets=_ordered(targets),
        )


def clears_favorite(requested: VehicleStatus) -> bool:
    """Un vehículo vendido o reservado deja de ser favorito."""
    return requested in _FAVORITE_CLEARING


def validate_creation_status(status: VehicleStatus) -> None:
    if status not in CREATION_STATUSES:
        allowed = ", ".join(s.value for s in sorted(CREATION_STATUSES, key=_ORDER.index))
        raise ValidationError(
            f"A new vehicle must start as one of: {allowed} (got {status.value})."
        )


def can_mark_favorite(
    current_favorite_count: int, max_slots: int = DEFAULT_MAX_FAVORITE_SLOTS
) -> bool:
    return current_favorite_count < max_slots


def ensure_favorite_slot(
    current_favorite_count: int, max_slots: int = DEFAULT_MAX_FAVORITE_SLOTS
) -> None:
    if not can_mark_favorite(current_favorite_count, max_slots):
        raise CapacityExceededError(max_slots, current_favorite_count)
