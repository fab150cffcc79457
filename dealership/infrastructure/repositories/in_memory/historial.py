# =============================================================================
# FILE: infrastructure/repositories/in_memory/historial.py
# =============================================================================
"""
In-Memory Historial (audit record) Repository for testing and development.

NOT FOR PRODUCTION USE - data is lost on restart.
"""

from __future__ import annotations

from typing import Dict, List, Optional
from uuid import UUID

from ....domain.audit import ActionKind, AuditRecord, EntityType
from ....domain.errors import ConflictError, ValidationError
from ....domain.repositories import AuditRecordFilters, PaginatedResult


class InMemoryAuditRecordRepository:
    """
    Append-only in-memory implementation of AuditRecordRepository.

    Newest-first ordering uses created_at and, for equal timestamps, the
    insertion sequence (a fixed test clock produces identical timestamps).
    Pagination follows the generic store: inactive rows are hidden unless
    `include_deleted`, and order_by is limited to ORDER_FIELDS.
    """

    ORDER_FIELDS = ("created_at", "updated_at")

    def __init__(self) -> None:
        self._records: Dict[UUID, AuditRecord] = {}
        self._sequence: Dict[UUID, int] = {}

    async def save(self, record: AuditRecord) -> AuditRecord:
        if record.id in self._records:
            raise ConflictError(f"Audit record '{record.id}' already exists.", fields=("id",))
        self._sequence[record.id] = len(self._sequence)
        self._records[record.id] = record
        return record

    async def find_by_entity(
        self,
        entity_id: str,
        entity_type: EntityType,
        *,
        action_kind: ActionKind | None = None,
        limit: int | None = None,
    ) -> List[AuditRecord]:
        results = [
            r
            for r in self._records.values()
            if r.entity_id == str(entity_id)
            and r.entity_type == entity_type
            and (action_kind is None or r.action_kind == action_kind)
        ]
        results = self._newest_first(results)
        return results[:limit] if limit is not None else results

    async def find_with_pagination(
        self,
        page: int,
        limit: int,
        filters: Optional[AuditRecordFilters] = None,
        order_by: str = "created_at",
        order_direction: str = "desc",
    ) -> PaginatedResult[AuditRecord]:
        if order_by not in self.ORDER_FIELDS:
            raise ValidationError(
                f"Cannot order by '{order_by}'. "
                f"Allowed: {', '.join(self.ORDER_FIELDS)}."
            )

        include_deleted = filters.include_deleted if filters is not None else False
        results = [r for r in self._records.values() if include_deleted or r.active]
        if filters is not None:
            if filters.entity_id is not None:
                results = [r for r in results if r.entity_id == filters.entity_id]
            if filters.entity_type is not None:
                results = [r for r in results if r.entity_type == filters.entity_type]
            if filters.action_kind is not None:
                results = [r for r in results if r.action_kind == filters.action_kind]

        results = self._newest_first(results, order_by)
        if order_direction.lower() == "asc":
            results.reverse()

        skip = (page - 1) * limit
        return PaginatedResult(data=results[skip : skip + limit], total=len(results))

    def _newest_first(
        self, records: List[AuditRecord], order_by: str = "created_at"
    ) -> List[AuditRecord]:
        return sorted(
            records,
            key=lambda r: (getattr(r, order_by), self._sequence[r.id]),
            reverse=True,
        )

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------

    def all(self) -> List[AuditRecord]:
        """Records in insertion order."""
        return sorted(self._records.values(), key=lambda r: self._sequence[r.id])

    def clear(self) -> None:
        self._records.clear()
        self._sequence.clear()
