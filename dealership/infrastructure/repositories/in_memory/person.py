"""
In-Memory Person Repository (testing / local development).
"""

from __future__ import annotations

from typing import Optional

from ....domain.entities import Person
from ....domain.repositories import BaseFilters, PersonFilters
from .base import InMemoryEntityStore, contains


class InMemoryPersonRepository(InMemoryEntityStore[Person]):
    RESOURCE = "User"
    ORDER_FIELDS = ("created_at", "updated_at", "name", "surname", "email", "role")
    UNIQUE_FIELDS = ("email",)

    async def find_by_email(self, email: str) -> Optional[Person]:
        return next((p for p in self._items.values() if p.email == email), None)

    def _matches(self, person: Person, filters: BaseFilters) -> bool:
        if not isinstance(filters, PersonFilters):
            return True
        if filters.name and not contains(person.name, filters.name):
            return False
        if filters.surname and not contains(person.surname, filters.surname):
            return False
        if filters.email and not contains(person.email, filters.email):
            return False
        if filters.role is not None and person.role != filters.role:
            return False
        return True
