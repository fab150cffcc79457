"""
===============================================================================
USE CASE: Create Person
===============================================================================

Class:
    CreatePersonUseCase

Responsibilities:
    - Validar invariantes con la password en claro (largo mínimo).
    - Garantizar email único.
    - Hashear la password ANTES de persistir.
    - Registrar CREAR (best-effort, sin datos sensibles).

Collaborators:
    - PersonRepository: find_by_email, save
    - PasswordHasher: hash
    - HistorialService: record_creation
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from ....domain.audit import EntityType
from ....domain.entities import Person
from ....domain.errors import ConflictError
from ....domain.repositories import PersonRepository
from ....domain.services import Clock, IdGenerator, PasswordHasher
from ...historial_service import HistorialService, audit_best_effort

logger = logging.getLogger(__name__)


def normalize_email(email: Any) -> Any:
    return email.strip().lower() if isinstance(email, str) else email


class CreatePersonUseCase:
    def __init__(
        self,
        person_repository: PersonRepository,
        historial: HistorialService,
        *,
        clock: Clock,
        id_generator: IdGenerator,
        password_hasher: PasswordHasher,
    ) -> None:
        self._persons = person_repository
        self._historial = historial
        self._clock = clock
        self._ids = id_generator
        self._hasher = password_hasher

    async def execute(
        self, data: Mapping[str, Any], *, actor_id: str | None = None
    ) -> Person:
        attrs = dict(data)
        attrs["email"] = normalize_email(attrs.get("email"))

        # ----- 1) Construir con password en claro (valida largo) -----
        person = Person.create(
            id=self._ids.new_id(), by=actor_id, at=self._clock.now(), **attrs
        )

        # ----- 2) Email único -----
        if await self._persons.find_by_email(person.email) is not None:
            raise ConflictError(
                f"A user with email '{person.email}' already exists.",
                fields=("email",),
            )

        # ----- 3) Hash + persistir -----
        person = replace(person, password=self._hasher.hash(person.password))
        saved = await self._persons.save(person)
        logger.info(
            "Usuario creado",
            extra={"person_id": str(saved.id), "role": saved.role.value},
        )

        # ----- 4) Historial (best-effort) -----
        await audit_best_effort(
            self._historial.record_creation(
                saved.id,
                EntityType.PERSON,
                actor_id,
                metadata={"person": saved.snapshot()},
                notes=f"User created: {saved.full_name} - {saved.email}",
            ),
            operation="create_person",
            entity_id=saved.id,
        )
        return saved
