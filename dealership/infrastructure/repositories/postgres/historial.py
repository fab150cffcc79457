"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/historial.py
============================================================
Class: PostgresAuditRecordRepository

Responsibilities:
  - Persistir registros de historial en la tabla `historial` (append-only).
  - Listar por entidad (más reciente primero) y paginar para el admin.

Collaborators:
  - domain.audit.AuditRecord
  - psycopg.types.json.Jsonb (metadata)
  - crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - No hay UPDATE ni DELETE: un registro nunca cambia.
  - Orden estable: created_at DESC, id DESC.
  - La paginación es la del store genérico: mismo filtro `active` y el mismo
    allow-list de order_by que el resto de las tablas.
============================================================
"""

from __future__ import annotations

from typing import Any, Dict, List

from psycopg import sql
from psycopg.types.json import Jsonb

from ....domain.audit import ActionKind, AuditRecord, EntityType
from ....domain.repositories import AuditRecordFilters, BaseFilters
from .base import Condition, PostgresEntityStore


class PostgresAuditRecordRepository(PostgresEntityStore[AuditRecord]):
    TABLE = "historial"
    RESOURCE = "Audit record"
    COLUMNS = (
        "entity_id",
        "entity_type",
        "action_kind",
        "field_affected",
        "value_before",
        "value_after",
        "notes",
        "metadata",
    )

    def _to_entity(self, row: Dict[str, Any]) -> AuditRecord:
        return AuditRecord(
            id=row["id"],
            entity_id=row["entity_id"],
            entity_type=row["entity_type"],
            action_kind=row["action_kind"],
            field_affected=row["field_affected"],
            value_before=row["value_before"],
            value_after=row["value_after"],
            notes=row["notes"],
            metadata=row["metadata"] or {},
            audit=self._audit_from_row(row),
        )

    def _to_params(self, record: AuditRecord) -> Dict[str, Any]:
        return {
            "id": record.id,
            "entity_id": record.entity_id,
            "entity_type": record.entity_type.value,
            "action_kind": record.action_kind.value,
            "field_affected": record.field_affected,
            "value_before": record.value_before,
            "value_after": record.value_after,
            "notes": record.notes,
            "metadata": Jsonb(dict(record.metadata)),
            **self._audit_params(record.audit),
        }

    def _conditions(self, filters: BaseFilters) -> List[Condition]:
        if not isinstance(filters, AuditRecordFilters):
            return []

        conditions: List[Condition] = []
        if filters.entity_id is not None:
            conditions.append((sql.SQL("entity_id = %s"), [filters.entity_id]))
        if filters.entity_type is not None:
            conditions.append((sql.SQL("entity_type = %s"), [filters.entity_type.value]))
        if filters.action_kind is not None:
            conditions.append((sql.SQL("action_kind = %s"), [filters.action_kind.value]))
        return conditions

    async def find_by_entity(
        self,
        entity_id: str,
        entity_type: EntityType,
        *,
        action_kind: ActionKind | None = None,
        limit: int | None = None,
    ) -> List[AuditRecord]:
        clauses = [sql.SQL("entity_id = %s"), sql.SQL("entity_type = %s")]
        params: List[Any] = [str(entity_id), entity_type.value]
        if action_kind is not None:
            clauses.append(sql.SQL("action_kind = %s"))
            params.append(action_kind.value)

        limit_clause = sql.SQL("")
        if limit is not None:
            limit_clause = sql.SQL(" LIMIT %s")
            params.append(limit)

        query = sql.SQL(
            "SELECT {cols} FROM {table} WHERE {where} "
            "ORDER BY created_at DESC, id DESC{limit}"
        ).format(
            cols=self._select_columns(),
            table=self._table,
            where=sql.SQL(" AND ").join(clauses),
            limit=limit_clause,
        )
        rows = await self._fetch(
            query, params, error_message="Failed to list entity history"
        )
        return [self._to_entity(r) for r in rows]
