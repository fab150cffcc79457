"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/vehicle.py
============================================================
Class: PostgresVehicleRepository

Responsibilities:
  - Persistir vehículos en la tabla `vehicles`.
  - Filtros del listado (nombre/modelo ILIKE, marca exacta, rangos de
    precio y fecha, solo favoritos).
  - Conteo de favoritos activos y marcas disponibles.

Collaborators:
  - PostgresEntityStore (base)
  - domain.entities.Vehicle
============================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from psycopg import sql

from ....domain.entities import VEHICLE_LIST_FIELDS, Vehicle
from ....domain.repositories import BaseFilters, VehicleFilters
from .base import Condition, PostgresEntityStore


class PostgresVehicleRepository(PostgresEntityStore[Vehicle]):
    TABLE = "vehicles"
    RESOURCE = "Vehicle"
    COLUMNS = (
        "name",
        "description",
        "notes",
        "plate",
        "make",
        "model",
        "version",
        "year",
        "mileage",
        "price",
        "cost",
        "transmission",
        "color",
        "status",
        "favorite",
    ) + VEHICLE_LIST_FIELDS
    ORDER_COLUMNS = (
        "created_at",
        "updated_at",
        "name",
        "make",
        "model",
        "year",
        "price",
        "mileage",
        "status",
    )
    UNIQUE_CONSTRAINTS = {"uq_vehicles_plate": "plate"}

    def _to_entity(self, row: Dict[str, Any]) -> Vehicle:
        return Vehicle(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            notes=row["notes"] or "",
            plate=row["plate"],
            make=row["make"],
            model=row["model"],
            version=row["version"] or "",
            year=row["year"],
            mileage=row["mileage"],
            # NUMERIC -> Decimal
            price=float(row["price"]),
            cost=float(row["cost"]),
            transmission=row["transmission"],
            color=row["color"],
            status=row["status"],
            favorite=row["favorite"],
            **{name: tuple(row[name] or ()) for name in VEHICLE_LIST_FIELDS},
            audit=self._audit_from_row(row),
        )

    def _to_params(self, vehicle: Vehicle) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "id": vehicle.id,
            "name": vehicle.name,
            "description": vehicle.description,
            "notes": vehicle.notes,
            "plate": vehicle.plate,
            "make": vehicle.make,
            "model": vehicle.model,
            "version": vehicle.version,
            "year": vehicle.year,
            "mileage": vehicle.mileage,
            "price": vehicle.price,
            "cost": vehicle.cost,
            "transmission": vehicle.transmission.value,
            "color": vehicle.color.value,
            "status": vehicle.status.value,
            "favorite": vehicle.favorite,
        }
        for name in VEHICLE_LIST_FIELDS:
            # psycopg adapta list -> text[] (tuple no)
            params[name] = list(getattr(vehicle, name))
        params.update(self._audit_params(vehicle.audit))
        return params

    def _conditions(self, filters: BaseFilters) -> List[Condition]:
        if not isinstance(filters, VehicleFilters):
            return []

        conditions: List[Condition] = []
        if filters.name:
            conditions.append((sql.SQL("name ILIKE %s"), [f"%{filters.name}%"]))
        if filters.make:
            conditions.append((sql.SQL("make = %s"), [filters.make]))
        if filters.model:
            conditions.append((sql.SQL("model ILIKE %s"), [f"%{filters.model}%"]))
        if filters.year is not None:
            conditions.append((sql.SQL("year = %s"), [filters.year]))
        if filters.status is not None:
            conditions.append((sql.SQL("status = %s"), [filters.status.value]))
        if filters.price_min is not None:
            conditions.append((sql.SQL("price >= %s"), [filters.price_min]))
        if filters.price_max is not None:
            conditions.append((sql.SQL("price <= %s"), [filters.price_max]))
        if filters.created_from is not None:
            conditions.append((sql.SQL("created_at >= %s"), [filters.created_from]))
        if filters.created_to is not None:
            conditions.append((sql.SQL("created_at <= %s"), [filters.created_to]))
        if filters.only_favorites:
            conditions.append((sql.SQL("favorite = TRUE"), []))
        return conditions

    # ------------------------------------------------------------
    # Consultas propias
    # ------------------------------------------------------------
    async def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        query = sql.SQL("SELECT {cols} FROM {table} WHERE plate = %s").format(
            cols=self._select_columns(), table=self._table
        )
        rows = await self._fetch(
            query, (plate,), error_message="Failed to get vehicle by plate"
        )
        return self._to_entity(rows[0]) if rows else None

    async def count_favorites(self) -> int:
        query = sql.SQL(
            "SELECT count(*) AS total FROM {table} WHERE favorite = TRUE AND active = TRUE"
        ).format(table=self._table)
        rows = await self._fetch(query, (), error_message="Failed to count favorites")
        return int(rows[0]["total"]) if rows else 0

    async def find_favorites(self) -> List[Vehicle]:
        query = sql.SQL(
            "SELECT {cols} FROM {table} WHERE favorite = TRUE AND active = TRUE "
            "ORDER BY updated_at DESC"
        ).format(cols=self._select_columns(), table=self._table)
        rows = await self._fetch(query, (), error_message="Failed to list favorites")
        return [self._to_entity(r) for r in rows]

    async def available_makes(self) -> List[str]:
        query = sql.SQL(
            "SELECT DISTINCT make FROM {table} "
            "WHERE active = TRUE AND btrim(make) <> '' ORDER BY make"
        ).format(table=self._table)
        rows = await self._fetch(query, (), error_message="Failed to list makes")
        return [r["make"] for r in rows]
