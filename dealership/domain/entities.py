"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (Vehicle, Person) + AuditFields + HasLifecycle

Responsabilidades:
    - Definir los registros inmutables del negocio.
    - Validar invariantes en TODA construcción y en TODO update_with().
    - Proveer update copy-on-write: merge estructural + updated_at refrescado.

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - domain.change_detection: compara entidades contra un patch.
    - application.usecases: construyen/consumen estas entidades.

Principios:
    - Sin dependencias a DB/HTTP.
    - Composición: cada entidad embebe un AuditFields (no hay clase base).
    - Inmutabilidad: frozen dataclasses; listas se guardan como tuplas.
===============================================================================
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Tuple, runtime_checkable
from uuid import UUID

from .errors import ValidationError


def _utcnow() -> datetime:
    """Fecha/hora UTC (helper interno)."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Audit fields (value object compartido)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuditFields:
    """
    Campos comunes de auditoría embebidos en cada entidad rastreada.

    active=False es el soft delete; nunca se borra físicamente.
    """

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    active: bool = True

    @classmethod
    def new(cls, *, by: str | None, at: datetime | None = None) -> "AuditFields":
        now = at or _utcnow()
        return cls(created_at=now, updated_at=now, created_by=by, updated_by=by)

    def touched(self, *, at: datetime | None = None, by: str | None = None) -> "AuditFields":
        return replace(
            self,
            updated_at=at or _utcnow(),
            updated_by=by if by is not None else self.updated_by,
        )

    def deactivated(self, *, at: datetime | None = None, by: str | None = None) -> "AuditFields":
        return replace(self.touched(at=at, by=by), active=False)

    def reactivated(self, *, at: datetime | None = None, by: str | None = None) -> "AuditFields":
        return replace(self.touched(at=at, by=by), active=True)


@runtime_checkable
class HasLifecycle(Protocol):
    """Capacidad mínima que Stores y el HistorialService necesitan."""

    @property
    def id(self) -> UUID: ...

    @property
    def created_at(self) -> datetime: ...

    @property
    def updated_at(self) -> datetime: ...

    @property
    def active(self) -> bool: ...


class _LifecycleMixin:
    """Expone los campos de AuditFields como propiedades planas."""

    __slots__ = ()

    audit: AuditFields

    @property
    def created_at(self) -> datetime:
        return self.audit.created_at

    @property
    def updated_at(self) -> datetime:
        return self.audit.updated_at

    @property
    def created_by(self) -> Optional[str]:
        return self.audit.created_by

    @property
    def updated_by(self) -> Optional[str]:
        return self.audit.updated_by

    @property
    def active(self) -> bool:
        return self.audit.active

    @property
    def is_deleted(self) -> bool:
        """True si está soft-deleted."""
        return not self.audit.active


def _merge(entity: Any, patch: Mapping[str, Any], *, at: datetime | None, by: str | None) -> Any:
    """
    Merge estructural: la clave presente gana, la ausente conserva el valor.

    `id` y `audit` no son parcheables; claves desconocidas son un error.
    """
    allowed = {f.name for f in fields(entity)} - {"id", "audit"}
    unknown = sorted(set(patch) - allowed)
    if unknown:
        raise ValidationError(
            f"Unknown field(s) for {type(entity).__name__}: {', '.join(unknown)}"
        )
    # replace() vuelve a correr __post_init__ => mismas invariantes que al construir
    return replace(entity, **dict(patch), audit=entity.audit.touched(at=at, by=by))


# ---------------------------------------------------------------------------
# Vehicle
# ---------------------------------------------------------------------------


class VehicleStatus(str, Enum):
    """Estado del ciclo de vida de un vehículo."""

    TO_BE_INTAKEN = "POR_INGRESAR"
    AVAILABLE = "DISPONIBLE"
    RESERVED = "RESERVADO"
    SOLD = "VENDIDO"


class Transmission(str, Enum):
    MANUAL = "MANUAL"
    AUTOMATIC = "AUTOMATICA"


class Color(str, Enum):
    WHITE = "BLANCO"
    BLACK = "NEGRO"
    GRAY = "GRIS"
    RED = "ROJO"
    BLUE = "AZUL"
    GREEN = "VERDE"
    YELLOW = "AMARILLO"
    OTHER = "OTRO"


VEHICLE_LIST_FIELDS: Tuple[str, ...] = (
    "highlighted_equipment",
    "general_features",
    "exterior",
    "comfort",
    "safety",
    "interior",
    "entertainment",
)


@dataclass(frozen=True, slots=True)
class Vehicle(_LifecycleMixin):
    """
    Vehículo del inventario.

    Invariantes (construcción y update):
      - price >= 0, cost >= 0, mileage >= 0
      - year <= año del updated_at (el reloj inyectado vía `at`)
      - price, cost, mileage y year deben ser numéricos (mileage y year enteros)
      - plate (matrícula) no vacía
    """

    id: UUID
    name: str
    plate: str
    make: str
    model: str
    year: int
    price: float
    cost: float
    mileage: int = 0
    description: str = ""
    notes: str = ""
    version: str = ""
    color: Color = Color.OTHER
    transmission: Transmission = Transmission.MANUAL
    status: VehicleStatus = VehicleStatus.TO_BE_INTAKEN
    favorite: bool = False

    highlighted_equipment: Tuple[str, ...] = ()
    general_features: Tuple[str, ...] = ()
    exterior: Tuple[str, ...] = ()
    comfort: Tuple[str, ...] = ()
    safety: Tuple[str, ...] = ()
    interior: Tuple[str, ...] = ()
    entertainment: Tuple[str, ...] = ()

    audit: AuditFields = field(default_factory=AuditFields)

    def __post_init__(self) -> None:
        # Coerción de enums y listas (el caller puede pasar str / list)
        object.__setattr__(self, "status", coerce_enum(VehicleStatus, self.status, "status"))
        object.__setattr__(self, "color", coerce_enum(Color, self.color, "color"))
        object.__setattr__(
            self,
            "transmission",
            coerce_enum(Transmission, self.transmission, "transmission"),
        )
        for name in VEHICLE_LIST_FIELDS:
            object.__setattr__(self, name, _as_str_tuple(getattr(self, name), name))

        self._validate()

    def _validate(self) -> None:
        object.__setattr__(self, "price", _as_number(self.price, "price"))
        object.__setattr__(self, "cost", _as_number(self.cost, "cost"))
        object.__setattr__(self, "mileage", _as_whole_number(self.mileage, "mileage"))
        object.__setattr__(self, "year", _as_whole_number(self.year, "year"))
        _as_text(self.plate, "plate")

        if self.price < 0:
            raise ValidationError("Price cannot be negative.")
        if self.cost < 0:
            raise ValidationError("Cost cannot be negative.")
        if self.mileage < 0:
            raise ValidationError("Mileage cannot be negative.")
        # Año de referencia: el del último write (reloj inyectado vía `at`)
        current_year = self.audit.updated_at.year
        if self.year > current_year:
            raise ValidationError(
                f"Year cannot be later than the current year ({current_year})."
            )
        if not self.plate or not self.plate.strip():
            raise ValidationError("Registration plate is required.")

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        by: str | None = None,
        at: datetime | None = None,
        **attrs: Any,
    ) -> "Vehicle":
        """Alta de un vehículo nuevo (favorite siempre arranca en False)."""
        attrs.pop("favorite", None)
        return cls(id=id, audit=AuditFields.new(by=by, at=at), **attrs)

    def update_with(
        self,
        patch: Mapping[str, Any],
        *,
        at: datetime | None = None,
        by: str | None = None,
    ) -> "Vehicle":
        """Copia con los campos del patch aplicados (re-valida invariantes)."""
        return _merge(self, patch, at=at, by=by)

    def deactivated(self, *, at: datetime | None = None, by: str | None = None) -> "Vehicle":
        return replace(self, audit=self.audit.deactivated(at=at, by=by))

    def reactivated(self, *, at: datetime | None = None, by: str | None = None) -> "Vehicle":
        return replace(self, audit=self.audit.reactivated(at=at, by=by))

    def snapshot(self) -> dict[str, Any]:
        """Resumen corto para metadata de auditoría."""
        return {
            "name": self.name,
            "plate": self.plate,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "price": self.price,
            "status": self.status.value,
        }


# ---------------------------------------------------------------------------
# Person
# ---------------------------------------------------------------------------


class Role(str, Enum):
    ADMIN = "ADMIN"
    SALESPERSON = "VENDEDOR"
    CUSTOMER = "CLIENTE"


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True, slots=True)
class Person(_LifecycleMixin):
    """
    Persona del sistema (admin, vendedor o cliente).

    Nota:
      - password es opaco para el dominio (en persistencia ya viene hasheado).
    """

    id: UUID
    name: str
    surname: str
    email: str
    password: str = field(repr=False)
    phone: Optional[str] = None
    role: Role = Role.CUSTOMER
    audit: AuditFields = field(default_factory=AuditFields)

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", coerce_enum(Role, self.role, "role"))
        self._validate()

    def _validate(self) -> None:
        for name in ("name", "surname", "email", "password"):
            _as_text(getattr(self, name), name)
        if self.phone is not None:
            _as_text(self.phone, "phone")

        if not self.name or not self.name.strip():
            raise ValidationError("Name is required.")
        if not self.surname or not self.surname.strip():
            raise ValidationError("Surname is required.")
        if not self.email or not self.email.strip():
            raise ValidationError("Email is required.")
        if not _EMAIL_RE.match(self.email):
            raise ValidationError("Email format is not valid.")
        if not self.password or not self.password.strip():
            raise ValidationError("Password is required.")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        by: str | None = None,
        at: datetime | None = None,
        **attrs: Any,
    ) -> "Person":
        return cls(id=id, audit=AuditFields.new(by=by, at=at), **attrs)

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}"

    def update_with(
        self,
        patch: Mapping[str, Any],
        *,
        at: datetime | None = None,
        by: str | None = None,
    ) -> "Person":
        return _merge(self, patch, at=at, by=by)

    def deactivated(self, *, at: datetime | None = None, by: str | None = None) -> "Person":
        return replace(self, audit=self.audit.deactivated(at=at, by=by))

    def reactivated(self, *, at: datetime | None = None, by: str | None = None) -> "Person":
        return replace(self, audit=self.audit.reactivated(at=at, by=by))

    def snapshot(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "surname": self.surname,
            "email": self.email,
            "role": self.role.value,
        }


# ---------------------------------------------------------------------------
# Helpers de coerción
# ---------------------------------------------------------------------------


def coerce_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field_name} '{value}'. Allowed values: {allowed}."
        ) from None


def _as_str_tuple(value: Any, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationError(f"Field '{field_name}' must be a list of strings.")
    return tuple(str(item) for item in value)


def _as_number(value: Any, field_name: str) -> float | int:
    """int / float tal cual; Decimal (filas de Postgres) -> float."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationError(f"Field '{field_name}' must be a number.")
    if isinstance(value, Decimal):
        value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"Field '{field_name}' must be a finite number.")
    return value


def _as_whole_number(value: Any, field_name: str) -> int:
    number = _as_number(value, field_name)
    if number != int(number):
        raise ValidationError(f"Field '{field_name}' must be a whole number.")
    return int(number)


def _as_text(value: Any, field_name: str) -> None:
    # None cae en el chequeo de "requerido" de cada entidad
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"Field '{field_name}' must be text.")
