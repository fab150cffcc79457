"""
In-Memory Vehicle Repository (testing / local development).
"""

from __future__ import annotations

from typing import List, Optional

from ....domain.entities import Vehicle
from ....domain.repositories import BaseFilters, VehicleFilters
from .base import InMemoryEntityStore, contains


class InMemoryVehicleRepository(InMemoryEntityStore[Vehicle]):
    RESOURCE = "Vehicle"
    ORDER_FIELDS = (
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
    UNIQUE_FIELDS = ("plate",)

    async def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        return next((v for v in self._items.values() if v.plate == plate), None)

    async def count_favorites(self) -> int:
        return sum(1 for v in self._items.values() if v.favorite and v.active)

    async def find_favorites(self) -> List[Vehicle]:
        favorites = [v for v in self._items.values() if v.favorite and v.active]
        favorites.sort(key=lambda v: v.updated_at, reverse=True)
        return favorites

    async def available_makes(self) -> List[str]:
        return sorted(
            {v.make for v in self._items.values() if v.active and v.make and v.make.strip()}
        )

    def _matches(self, vehicle: Vehicle, filters: BaseFilters) -> bool:
        if not isinstance(filters, VehicleFilters):
            return True
        if filters.name and not contains(vehicle.name, filters.name):
            return False
        if filters.make and vehicle.make != filters.make:
            return False
        if filters.model and not contains(vehicle.model, filters.model):
            return False
        if filters.year is not None and vehicle.year != filters.year:
            return False
        if filters.status is not None and vehicle.status != filters.status:
            return False
        if filters.price_min is not None and vehicle.price < filters.price_min:
            return False
        if filters.price_max is not None and vehicle.price > filters.price_max:
            return False
        if filters.created_from is not None and vehicle.created_at < filters.created_from:
            return False
        if filters.created_to is not None and vehicle.created_at > filters.created_to:
            return False
        if filters.only_favorites and not vehicle.favorite:
            return False
        return True
