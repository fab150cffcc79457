"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/base.py
============================================================
Class: PostgresEntityStore

Responsibilities:
  - Implementar el contrato EntityStore genérico sobre una tabla con
    columnas de auditoría (created_at, updated_at, created_by, updated_by,
    active).
  - Paginar con filtros + orden (identificadores vía psycopg.sql).
  - Traducir UniqueViolation -> ConflictError y el resto -> DatabaseError.

Collaborators:
  - psycopg_pool.AsyncConnectionPool
  - psycopg.sql (Identifier / SQL)
  - crosscutting.logger.logger

Constraints / Notes:
  - Queries SIEMPRE parametrizadas.
  - order_by se valida contra ORDER_COLUMNS: nunca se interpola input crudo.
  - Subclases definen TABLE, COLUMNS, _to_entity, _to_params, _conditions.
============================================================
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar
from uuid import UUID

import psycopg
from psycopg import sql
from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import AuditFields
from ....domain.errors import ConflictError, NotFoundError, ValidationError
from ....domain.repositories import BaseFilters, PaginatedResult

T = TypeVar("T")

AUDIT_COLUMNS: Tuple[str, ...] = (
    "created_at",
    "updated_at",
    "created_by",
    "updated_by",
    "active",
)

Condition = Tuple[sql.Composable, List[Any]]


class PostgresEntityStore(Generic[T]):
    TABLE: str = ""
    RESOURCE: str = "Entity"
    # Columnas propias (sin id ni auditoría), en orden de INSERT
    COLUMNS: Tuple[str, ...] = ()
    ORDER_COLUMNS: Tuple[str, ...] = ("created_at", "updated_at")
    # constraint_name -> campo, para mensajes de conflicto
    UNIQUE_CONSTRAINTS: Dict[str, str] = {}

    def __init__(self, pool: AsyncConnectionPool | None = None):
        # Pool inyectable: tests pueden pasar su pool; prod usa el pool global.
        self._pool = pool

    def _get_pool(self) -> AsyncConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    # ------------------------------------------------------------
    # Mapeo (subclases)
    # ------------------------------------------------------------
    def _to_entity(self, row: Dict[str, Any]) -> T:
        raise NotImplementedError

    def _to_params(self, entity: T) -> Dict[str, Any]:
        raise NotImplementedError

    def _conditions(self, filters: BaseFilters) -> List[Condition]:
        return []

    # ------------------------------------------------------------
    # Helpers SQL
    # ------------------------------------------------------------
    @property
    def _table(self) -> sql.Identifier:
        return sql.Identifier(self.TABLE)

    def _select_columns(self) -> sql.Composable:
        return sql.SQL(", ").join(
            sql.Identifier(c) for c in ("id", *self.COLUMNS, *AUDIT_COLUMNS)
        )

    async def _fetch(
        self,
        query: sql.Composable,
        params: Sequence[Any] | Mapping[str, Any],
        *,
        error_message: str,
    ) -> List[Dict[str, Any]]:
        try:
            pool = self._get_pool()
            async with pool.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        query, params if isinstance(params, Mapping) else tuple(params)
                    )
                    return await cur.fetchall()
        except UniqueViolation as exc:
            raise self._conflict(exc) from exc
        except psycopg.Error as exc:
            logger.exception(
                error_message, extra={"table": self.TABLE, "error": str(exc)}
            )
            raise DatabaseError(f"{error_message}: {exc}") from exc

    def _conflict(self, exc: UniqueViolation) -> ConflictError:
        constraint = getattr(exc.diag, "constraint_name", None) or ""
        field = self.UNIQUE_CONSTRAINTS.get(constraint)
        if field is None:
            return ConflictError(f"{self.RESOURCE} violates a unique constraint.")
        return ConflictError(
            f"{self.RESOURCE} with the same {field} already exists.", fields=(field,)
        )

    @staticmethod
    def _audit_from_row(row: Dict[str, Any]) -> AuditFields:
        return AuditFields(
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            created_by=row["created_by"],
            updated_by=row["updated_by"],
            active=row["active"],
        )

    @staticmethod
    def _audit_params(audit: AuditFields) -> Dict[str, Any]:
        return {
            "created_at": audit.created_at,
            "updated_at": audit.updated_at,
            "created_by": audit.created_by,
            "updated_by": audit.updated_by,
            "active": audit.active,
        }

    # ------------------------------------------------------------
    # EntityStore
    # ------------------------------------------------------------
    async def find_all(self) -> List[T]:
        query = sql.SQL("SELECT {cols} FROM {table} ORDER BY created_at DESC").format(
            cols=self._select_columns(), table=self._table
        )
        rows = await self._fetch(query, (), error_message=f"Failed to list {self.TABLE}")
        return [self._to_entity(r) for r in rows]

    async def find_all_active(self) -> List[T]:
        query = sql.SQL(
            "SELECT {cols} FROM {table} WHERE active = TRUE ORDER BY created_at DESC"
        ).format(cols=self._select_columns(), table=self._table)
        rows = await self._fetch(query, (), error_message=f"Failed to list {self.TABLE}")
        return [self._to_entity(r) for r in rows]

    async def find_by_id(self, entity_id: UUID) -> Optional[T]:
        query = sql.SQL("SELECT {cols} FROM {table} WHERE id = %s").format(
            cols=self._select_columns(), table=self._table
        )
        rows = await self._fetch(
            query, (entity_id,), error_message=f"Failed to get {self.RESOURCE}"
        )
        return self._to_entity(rows[0]) if rows else None

    async def soft_delete(self, entity_id: UUID, *, by: str | None = None) -> T:
        return await self._set_active(entity_id, False, by)

    async def restore(self, entity_id: UUID, *, by: str | None = None) -> T:
        return await self._set_active(entity_id, True, by)

    async def _set_active(self, entity_id: UUID, active: bool, by: str | None) -> T:
        query = sql.SQL(
            "UPDATE {table} SET active = %s, updated_at = now(), "
            "updated_by = COALESCE(%s::text, updated_by) WHERE id = %s RETURNING {cols}"
        ).format(table=self._table, cols=self._select_columns())
        rows = await self._fetch(
            query,
            (active, by, entity_id),
            error_message=f"Failed to change {self.RESOURCE} active flag",
        )
        if not rows:
            raise NotFoundError(self.RESOURCE, entity_id)
        return self._to_entity(rows[0])

    async def find_with_pagination(
        self,
        page: int,
        limit: int,
        filters: Optional[BaseFilters] = None,
        order_by: str = "created_at",
        order_direction: str = "desc",
    ) -> PaginatedResult[T]:
        if order_by not in self.ORDER_COLUMNS:
            raise ValidationError(
                f"Cannot order by '{order_by}'. "
                f"Allowed: {', '.join(self.ORDER_COLUMNS)}."
            )
        direction = sql.SQL("ASC" if order_direction.lower() == "asc" else "DESC")

        conditions: List[Condition] = []
        if filters is None or not filters.include_deleted:
            conditions.append((sql.SQL("active = TRUE"), []))
        if filters is not None:
            conditions.extend(self._conditions(filters))

        where = sql.SQL("")
        params: List[Any] = []
        if conditions:
            where = sql.SQL(" WHERE ") + sql.SQL(" AND ").join(c for c, _ in conditions)
            for _, p in conditions:
                params.extend(p)

        count_query = sql.SQL("SELECT count(*) AS total FROM {table}{where}").format(
            table=self._table, where=where
        )
        page_query = sql.SQL(
            "SELECT {cols} FROM {table}{where} ORDER BY {order} {direction}, id "
            "LIMIT %s OFFSET %s"
        ).format(
            cols=self._select_columns(),
            table=self._table,
            where=where,
            order=sql.Identifier(order_by),
            direction=direction,
        )

        skip = (page - 1) * limit
        error_message = f"Failed to paginate {self.TABLE}"
        total_rows = await self._fetch(count_query, params, error_message=error_message)
        rows = await self._fetch(
            page_query, [*params, limit, skip], error_message=error_message
        )
        return PaginatedResult(
            data=[self._to_entity(r) for r in rows],
            total=int(total_rows[0]["total"]) if total_rows else 0,
        )

    # ------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------
    async def save(self, entity: T) -> T:
        params = self._to_params(entity)
        columns = ("id", *self.COLUMNS, *AUDIT_COLUMNS)
        query = sql.SQL(
            "INSERT INTO {table} ({cols}) VALUES ({values}) RETURNING {returning}"
        ).format(
            table=self._table,
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            values=sql.SQL(", ").join(sql.Placeholder(c) for c in columns),
            returning=self._select_columns(),
        )
        rows = await self._fetch(
            query, params, error_message=f"Failed to save {self.RESOURCE}"
        )
        return self._to_entity(rows[0])

    async def update(self, entity: T) -> T:
        params = self._to_params(entity)
        columns = (*self.COLUMNS, *AUDIT_COLUMNS)
        query = sql.SQL(
            "UPDATE {table} SET {assignments} WHERE id = {id} RETURNING {returning}"
        ).format(
            table=self._table,
            assignments=sql.SQL(", ").join(
                sql.SQL("{} = {}").format(sql.Identifier(c), sql.Placeholder(c))
                for c in columns
            ),
            id=sql.Placeholder("id"),
            returning=self._select_columns(),
        )
        rows = await self._fetch(
            query, params, error_message=f"Failed to update {self.RESOURCE}"
        )
        if not rows:
            raise NotFoundError(self.RESOURCE, params["id"])
        return self._to_entity(rows[0])

