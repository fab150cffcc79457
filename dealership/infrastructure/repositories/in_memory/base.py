# =============================================================================
# FILE: infrastructure/repositories/in_memory/base.py
# =============================================================================
"""
In-Memory generic EntityStore for testing and development.

NOT FOR PRODUCTION USE - data is lost on restart.

Notes:
  - Entities are immutable: a write swaps the stored value, so readers never
    observe a half-applied update and no lock is needed on a single loop.
  - Subclasses declare ORDER_FIELDS / UNIQUE_FIELDS and filter matching.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar
from uuid import UUID

from ....domain.errors import ConflictError, NotFoundError, ValidationError
from ....domain.repositories import BaseFilters, PaginatedResult
from ....domain.services import Clock

T = TypeVar("T")


class InMemoryEntityStore(Generic[T]):
    """
    In-memory implementation of the EntityStore contract.

    Useful for:
      - Unit testing
      - Local development without database
    """

    RESOURCE: str = "Entity"
    ORDER_FIELDS: Tuple[str, ...] = ("created_at", "updated_at")
    UNIQUE_FIELDS: Tuple[str, ...] = ()

    def __init__(self, clock: Clock | None = None) -> None:
        self._items: Dict[UUID, T] = {}
        self._clock = clock

    # -------------------------------------------------------------------------
    # EntityStore
    # -------------------------------------------------------------------------

    async def find_all(self) -> List[T]:
        return list(self._items.values())

    async def find_all_active(self) -> List[T]:
        return [e for e in self._items.values() if e.active]

    async def find_by_id(self, entity_id: UUID) -> Optional[T]:
        return self._items.get(entity_id)

    async def soft_delete(self, entity_id: UUID, *, by: str | None = None) -> T:
        entity = self._require(entity_id)
        updated = entity.deactivated(at=self._now(), by=by)
        self._items[entity_id] = updated
        return updated

    async def restore(self, entity_id: UUID, *, by: str | None = None) -> T:
        entity = self._require(entity_id)
        updated = entity.reactivated(at=self._now(), by=by)
        self._items[entity_id] = updated
        return updated

    async def find_with_pagination(
        self,
        page: int,
        limit: int,
        filters: Optional[BaseFilters] = None,
        order_by: str = "created_at",
        order_direction: str = "desc",
    ) -> PaginatedResult[T]:
        if order_by not in self.ORDER_FIELDS:
            raise ValidationError(
                f"Cannot order by '{order_by}'. "
                f"Allowed: {', '.join(self.ORDER_FIELDS)}."
            )

        include_deleted = filters.include_deleted if filters is not None else False
        matched = [
            e
            for e in self._items.values()
            if (include_deleted or e.active)
            and (filters is None or self._matches(e, filters))
        ]
        matched.sort(
            key=_sort_key(order_by), reverse=order_direction.lower() == "desc"
        )

        skip = (page - 1) * limit
        return PaginatedResult(data=matched[skip : skip + limit], total=len(matched))

    # -------------------------------------------------------------------------
    # Writes (save / update) shared by concrete stores
    # -------------------------------------------------------------------------

    async def save(self, entity: T) -> T:
        if entity.id in self._items:
            raise ConflictError(
                f"{self.RESOURCE} '{entity.id}' already exists.", fields=("id",)
            )
        self._check_unique(entity)
        self._items[entity.id] = entity
        return entity

    async def update(self, entity: T) -> T:
        self._require(entity.id)
        self._check_unique(entity)
        self._items[entity.id] = entity
        return entity

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def _matches(self, entity: T, filters: BaseFilters) -> bool:
        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require(self, entity_id: UUID) -> T:
        entity = self._items.get(entity_id)
        if entity is None:
            raise NotFoundError(self.RESOURCE, entity_id)
        return entity

    def _check_unique(self, entity: T) -> None:
        for name in self.UNIQUE_FIELDS:
            value = getattr(entity, name)
            for other in self._items.values():
                if other.id != entity.id and getattr(other, name) == value:
                    raise ConflictError(
                        f"{self.RESOURCE} with {name} '{value}' already exists.",
                        fields=(name,),
                    )

    def _now(self):
        return self._clock.now() if self._clock is not None else None

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        self._items.clear()

    def count(self) -> int:
        return len(self._items)


def _sort_key(order_by: str) -> Callable[[Any], Any]:
    def key(entity: Any) -> Any:
        value = getattr(entity, order_by)
        # None al final en asc
        return (value is None, getattr(value, "value", value))

    return key


def contains(haystack: str | None, needle: str) -> bool:
    """Substring case-insensitive."""
    return haystack is not None and needle.lower() in haystack.lower()
