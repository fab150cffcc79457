"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/person.py
============================================================
Class: PostgresPersonRepository

Responsibilities:
  - Persistir personas en la tabla `persons` (password ya hasheada).
  - Filtros del listado (nombre/apellido/email ILIKE, rol exacto).
============================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from psycopg import sql

from ....domain.entities import Person
from ....domain.repositories import BaseFilters, PersonFilters
from .base import Condition, PostgresEntityStore


class PostgresPersonRepository(PostgresEntityStore[Person]):
    TABLE = "persons"
    RESOURCE = "User"
    COLUMNS = ("name", "surname", "email", "password", "phone", "role")
    ORDER_COLUMNS = ("created_at", "updated_at", "name", "surname", "email", "role")
    UNIQUE_CONSTRAINTS = {"uq_persons_email": "email"}

    def _to_entity(self, row: Dict[str, Any]) -> Person:
        return Person(
            id=row["id"],
            name=row["name"],
            surname=row["surname"],
            email=row["email"],
            password=row["password"],
            phone=row["phone"],
            role=row["role"],
            audit=self._audit_from_row(row),
        )

    def _to_params(self, person: Person) -> Dict[str, Any]:
        return {
            "id": person.id,
            "name": person.name,
            "surname": person.surname,
            "email": person.email,
            "password": person.password,
            "phone": person.phone,
            "role": person.role.value,
            **self._audit_params(person.audit),
        }

    def _conditions(self, filters: BaseFilters) -> List[Condition]:
        if not isinstance(filters, PersonFilters):
            return []

        conditions: List[Condition] = []
        if filters.name:
            conditions.append((sql.SQL("name ILIKE %s"), [f"%{filters.name}%"]))
        if filters.surname:
            conditions.append((sql.SQL("surname ILIKE %s"), [f"%{filters.surname}%"]))
        if filters.email:
            conditions.append((sql.SQL("email ILIKE %s"), [f"%{filters.email}%"]))
        if filters.role is not None:
            conditions.append((sql.SQL("role = %s"), [filters.role.value]))
        return conditions

    async def find_by_email(self, email: str) -> Optional[Person]:
        query = sql.SQL("SELECT {cols} FROM {table} WHERE email = %s").format(
            cols=self._select_columns(), table=self._table
        )
        rows = await self._fetch(
            query, (email,), error_message="Failed to get user by email"
        )
        return self._to_entity(rows[0]) if rows else None
