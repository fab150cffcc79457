"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols) + listing filters

Responsibilities
- Define the async persistence contracts (ports) for vehicles, persons and
  historial records.
- Define the generic EntityStore contract shared by every tracked entity.
- Carry listing filters as plain dataclasses.

Collaborators
- domain.entities: Vehicle, Person
- domain.audit: AuditRecord
- infrastructure.repositories: in_memory/*, postgres/* implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Soft delete only: records are never physically removed.
- soft_delete/restore/update raise NotFoundError for unknown ids.
- Unique-key violations raise ConflictError.

Notes
- typing.Protocol for structural subtyping ("duck typing").
- Filtering on `active` applies unless filters.include_deleted is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, Protocol, TypeVar
from uuid import UUID

from .audit import ActionKind, AuditRecord, EntityType
from .entities import Person, Role, Vehicle, VehicleStatus

T = TypeVar("T")


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of entities plus the total that matched the filters."""

    data: List[T] = field(default_factory=list)
    total: int = 0


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BaseFilters:
    include_deleted: bool = False


@dataclass(frozen=True)
class VehicleFilters(BaseFilters):
    name: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    status: Optional[VehicleStatus] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    only_favorites: bool = False


@dataclass(frozen=True)
class PersonFilters(BaseFilters):
    name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None


@dataclass(frozen=True)
class AuditRecordFilters(BaseFilters):
    entity_id: Optional[str] = None
    entity_type: Optional[EntityType] = None
    action_kind: Optional[ActionKind] = None


# ---------------------------------------------------------------------------
# Generic store
# ---------------------------------------------------------------------------


class EntityStore(Protocol[T]):
    """
    R: Generic contract for soft-deletable entities.

    Implementations must provide:
      - full / active-only listing
      - lookup by id
      - soft delete / restore
      - filtered, ordered pagination
    """

    async def find_all(self) -> List[T]:
        """R: Every entity, deleted ones included."""
        ...

    async def find_all_active(self) -> List[T]:
        """R: Entities with active=True."""
        ...

    async def find_by_id(self, entity_id: UUID) -> Optional[T]:
        """R: Entity by id (active or not), None if absent."""
        ...

    async def soft_delete(self, entity_id: UUID, *, by: str | None = None) -> T:
        """R: Mark active=False. Raises NotFoundError if absent."""
        ...

    async def restore(self, entity_id: UUID, *, by: str | None = None) -> T:
        """R: Mark active=True. Raises NotFoundError if absent."""
        ...

    async def find_with_pagination(
        self,
        page: int,
        limit: int,
        filters: Optional[BaseFilters] = None,
        order_by: str = "created_at",
        order_direction: str = "desc",
    ) -> PaginatedResult[T]:
        """
        R: Filtered page of entities.

        skip = (page - 1) * limit; order_by/order_direction are passed through.
        """
        ...


class VehicleRepository(EntityStore[Vehicle], Protocol):
    """R: Vehicle persistence."""

    async def save(self, vehicle: Vehicle) -> Vehicle:
        """R: Insert. Raises ConflictError on duplicated plate."""
        ...

    async def update(self, vehicle: Vehicle) -> Vehicle:
        """R: Replace an existing vehicle (NotFoundError / ConflictError)."""
        ...

    async def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        ...

    async def count_favorites(self) -> int:
        """R: Vehicles with favorite=True AND active=True."""
        ...

    async def find_favorites(self) -> List[Vehicle]:
        ...

    async def available_makes(self) -> List[str]:
        """R: Distinct makes of active vehicles, sorted."""
        ...


class PersonRepository(EntityStore[Person], Protocol):
    """R: Person persistence."""

    async def save(self, person: Person) -> Person:
        """R: Insert. Raises ConflictError on duplicated email."""
        ...

    async def update(self, person: Person) -> Person:
        ...

    async def find_by_email(self, email: str) -> Optional[Person]:
        ...


class AuditRecordRepository(Protocol):
    """R: Append-only historial persistence."""

    async def save(self, record: AuditRecord) -> AuditRecord:
        ...

    async def find_by_entity(
        self,
        entity_id: str,
        entity_type: EntityType,
        *,
        action_kind: ActionKind | None = None,
        limit: int | None = None,
    ) -> List[AuditRecord]:
        """R: Records for one entity, newest first."""
        ...

    async def find_with_pagination(
        self,
        page: int,
        limit: int,
        filters: Optional[AuditRecordFilters] = None,
        order_by: str = "created_at",
        order_direction: str = "desc",
    ) -> PaginatedResult[AuditRecord]:
        ...
