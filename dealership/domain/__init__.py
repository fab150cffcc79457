"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio

Responsabilidades:
    - Centralizar exports para imports limpios desde application/infra.

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .audit import ActionKind, AuditRecord, EntityType
from .change_detection import FieldChange, diff, diff_person, stringify
from .entities import (
    AuditFields,
    Color,
    HasLifecycle,
    Person,
    Role,
    Transmission,
    Vehicle,
    VehicleStatus,
)
from .errors import (
    CapacityExceededError,
    ConflictError,
    DisallowedTargetError,
    InvalidTransitionError,
    NoOpTransitionError,
    NotFoundError,
    TerminalStateError,
    TransitionError,
    ValidationError,
)
from .repositories import (
    AuditRecordFilters,
    AuditRecordRepository,
    BaseFilters,
    EntityStore,
    PaginatedResult,
    PersonFilters,
    PersonRepository,
    VehicleFilters,
    VehicleRepository,
)
from .services import Clock, IdGenerator, PasswordHasher

__all__ = [
    # Entities
    "AuditFields",
    "HasLifecycle",
    "Vehicle",
    "VehicleStatus",
    "Transmission",
    "Color",
    "Person",
    "Role",
    "AuditRecord",
    "EntityType",
    "ActionKind",
    # Change detection
    "FieldChange",
    "diff",
    "diff_person",
    "stringify",
    # Errors
    "ValidationError",
    "TransitionError",
    "TerminalStateError",
    "NoOpTransitionError",
    "DisallowedTargetError",
    "InvalidTransitionError",
    "CapacityExceededError",
    "NotFoundError",
    "ConflictError",
    # Repository Interfaces (Ports)
    "EntityStore",
    "VehicleRepository",
    "PersonRepository",
    "AuditRecordRepository",
    "PaginatedResult",
    "BaseFilters",
    "VehicleFilters",
    "PersonFilters",
    "AuditRecordFilters",
    # Service ports
    "Clock",
    "IdGenerator",
    "PasswordHasher",
]
