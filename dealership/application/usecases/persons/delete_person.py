"""
===============================================================================
USE CASE: Delete / Restore Person (soft delete)
===============================================================================

Mismas reglas que vehículos:
  - eliminar una persona ya eliminada es un error
  - restaurar una persona activa es un error
===============================================================================
"""

from __future__ import annotations

import logging
from uuid import UUID

from ....domain.audit import EntityType
from ....domain.entities import Person
from ....domain.errors import NotFoundError, ValidationError
from ....domain.repositories import PersonRepository
from ...historial_service import HistorialService, audit_best_effort

logger = logging.getLogger(__name__)


class DeletePersonUseCase:
    def __init__(
        self, person_repository: PersonRepository, historial: HistorialService
    ) -> None:
        self._persons = person_repository
        self._historial = historial

    async def execute(
        self,
        person_id: UUID,
        *,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> Person:
        person = await _load(self._persons, person_id)
        if not person.active:
            raise ValidationError("User is already deleted.")

        deleted = await self._persons.soft_delete(person.id, by=actor_id)
        logger.info("Usuario eliminado", extra={"person_id": str(person.id)})

        await audit_best_effort(
            self._historial.record_deletion(
                deleted.id,
                EntityType.PERSON,
                actor_id,
                notes=notes or f"User deleted: {deleted.full_name} - {deleted.email}",
                metadata={"person": deleted.snapshot()},
            ),
            operation="delete_person",
            entity_id=deleted.id,
        )
        return deleted


class RestorePersonUseCase:
    def __init__(
        self, person_repository: PersonRepository, historial: HistorialService
    ) -> None:
        self._persons = person_repository
        self._historial = historial

    async def execute(
        self,
        person_id: UUID,
        *,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> Person:
        person = await _load(self._persons, person_id)
        if person.active:
            raise ValidationError("User is already active.")

        restored = await self._persons.restore(person.id, by=actor_id)
        logger.info("Usuario restaurado", extra={"person_id": str(person.id)})

        await audit_best_effort(
            self._historial.record_restoration(
                restored.id,
                EntityType.PERSON,
                actor_id,
                notes=notes or f"User restored: {restored.full_name} - {restored.email}",
                metadata={"person": restored.snapshot()},
            ),
            operation="restore_person",
            entity_id=restored.id,
        )
        return restored


async def _load(persons: PersonRepository, person_id: UUID) -> Person:
    person = await persons.find_by_id(person_id)
    if person is None:
        raise NotFoundError("User", person_id)
    return person
