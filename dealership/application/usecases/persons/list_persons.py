"""
USE CASE: List Persons (listado paginado con filtros)
"""

from __future__ import annotations

from ....crosscutting.pagination import Page, PageRequest, build_page
from ....domain.entities import Person
from ....domain.repositories import PersonFilters, PersonRepository


class ListPersonsUseCase:
    def __init__(
        self, person_repository: PersonRepository, *, max_page_size: int = 100
    ) -> None:
        self._persons = person_repository
        self._max_page_size = max_page_size

    async def execute(
        self,
        request: PageRequest | None = None,
        filters: PersonFilters | None = None,
    ) -> Page[Person]:
        request = (request or PageRequest()).clamped(self._max_page_size)
        result = await self._persons.find_with_pagination(
            request.page,
            request.limit,
            filters or PersonFilters(),
            request.order_by,
            request.order_direction,
        )
        return build_page(
            result.data, page=request.page, limit=request.limit, total=result.total
        )
