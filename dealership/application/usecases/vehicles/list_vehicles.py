"""
===============================================================================
USE CASE: List Vehicles / List Favorites / Available Makes (consultas)
===============================================================================

Responsibilities:
    - Listado paginado con filtros (page/limit acotados por Settings).
    - Listado de favoritos activos (vitrina).
    - Marcas disponibles (para filtros del listado).
===============================================================================
"""

from __future__ import annotations

from typing import List

from ....crosscutting.pagination import Page, PageRequest, build_page
from ....domain.entities import Vehicle
from ....domain.repositories import VehicleFilters, VehicleRepository


class ListVehiclesUseCase:
    def __init__(
        self, vehicle_repository: VehicleRepository, *, max_page_size: int = 100
    ) -> None:
        self._vehicles = vehicle_repository
        self._max_page_size = max_page_size

    async def execute(
        self,
        request: PageRequest | None = None,
        filters: VehicleFilters | None = None,
    ) -> Page[Vehicle]:
        request = (request or PageRequest()).clamped(self._max_page_size)
        result = await self._vehicles.find_with_pagination(
            request.page,
            request.limit,
            filters or VehicleFilters(),
            request.order_by,
            request.order_direction,
        )
        return build_page(
            result.data, page=request.page, limit=request.limit, total=result.total
        )


class ListFavoritesUseCase:
    def __init__(self, vehicle_repository: VehicleRepository) -> None:
        self._vehicles = vehicle_repository

    async def execute(self) -> List[Vehicle]:
        return await self._vehicles.find_favorites()


class ListAvailableMakesUseCase:
    def __init__(self, vehicle_repository: VehicleRepository) -> None:
        self._vehicles = vehicle_repository

    async def execute(self) -> List[str]:
        return await self._vehicles.available_makes()
