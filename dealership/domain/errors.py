"""
===============================================================================
TARJETA CRC — domain/errors.py
===============================================================================

Módulo:
    Taxonomía de errores del dominio

Responsabilidades:
    - Representar cada rechazo de negocio con un tipo propio y un error_code
      estable (validación, máquina de estados, cupo de favoritos, store).
    - Llevar el contexto necesario para un mensaje preciso al usuario
      (estado actual, estado pedido, destinos válidos, invariante violado).

Colaboradores:
    - domain.entities / domain.audit: ValidationError en construcción/update.
    - domain.vehicle_lifecycle: errores de transición y de cupo.
    - domain.repositories (implementaciones): NotFoundError / ConflictError.

Notas:
    - Ninguno se reintenta dentro del core: todos se propagan al caller.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Iterable

from ..crosscutting.exceptions import DealershipError


class ValidationError(DealershipError):
    """Invariante violado al construir/actualizar una entidad."""

    error_code: str = "VALIDATION_ERROR"


class TransitionError(DealershipError):
    """Base de los rechazos de la máquina de estados de vehículos."""

    error_code: str = "INVALID_TRANSITION"

    def __init__(
        self,
        message: str,
        *,
        current: Any,
        requested: Any,
        valid_targets: Iterable[Any] = (),
    ):
        self.current = current
        self.requested = requested
        self.valid_targets = tuple(valid_targets)
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {
            "current": _value(self.current),
            "requested": _value(self.requested),
            "valid_targets": [_value(t) for t in self.valid_targets],
        }


class TerminalStateError(TransitionError):
    error_code: str = "TERMINAL_STATE"


class NoOpTransitionError(TransitionError):
    error_code: str = "NO_OP_TRANSITION"


class DisallowedTargetError(TransitionError):
    error_code: str = "DISALLOWED_TARGET"


class InvalidTransitionError(TransitionError):
    error_code: str = "INVALID_TRANSITION"


class CapacityExceededError(DealershipError):
    """Se alcanzó el cupo global de vehículos favoritos."""

    error_code: str = "CAPACITY_EXCEEDED"

    def __init__(self, max_slots: int, current_count: int):
        self.max_slots = max_slots
        self.current_count = current_count
        super().__init__(
            f"Cannot have more than {max_slots} favorite vehicles "
            f"(currently {current_count})."
        )

    def details(self) -> dict[str, Any]:
        return {"max_slots": self.max_slots, "current_count": self.current_count}


class NotFoundError(DealershipError):
    """Entidad inexistente (lo levanta la frontera del Store)."""

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = str(resource_id)
        super().__init__(f"{resource} '{resource_id}' not found.")

    def details(self) -> dict[str, Any]:
        return {"resource": self.resource, "id": self.resource_id}


class ConflictError(DealershipError):
    """Violación de unicidad (matrícula, email) traducida desde el storage."""

    error_code: str = "CONFLICT"

    def __init__(self, message: str, *, fields: Iterable[str] = ()):
        self.fields = tuple(fields)
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"fields": list(self.fields)} if self.fields else {}


def _value(item: Any) -> Any:
    return getattr(item, "value", item)
