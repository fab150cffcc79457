"""
===============================================================================
USE CASE: Update Person / Change Password
===============================================================================

Business Goal:
    Aplicar un patch parcial sobre una persona y registrar un ACTUALIZAR por
    campo modificado. La password nunca se expone en el historial.

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) El email no es actualizable.
R2) Si se envía password: se valida en claro, se hashea y el historial
    registra "[PROTEGIDO]" -> "[ACTUALIZADO]".
R3) Cambio de password dedicado: exige la password actual.
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping
from uuid import UUID

from ....domain.audit import AuditRecord, EntityType
from ....domain.change_detection import (
    PROTECTED_VALUE,
    UPDATED_VALUE,
    FieldChange,
    diff_person,
)
from ....domain.entities import Person
from ....domain.errors import NotFoundError, ValidationError
from ....domain.repositories import PersonRepository
from ....domain.services import Clock, PasswordHasher
from ...historial_service import (
    HistorialService,
    audit_all_best_effort,
    audit_best_effort,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdatePersonResult:
    person: Person
    changes: List[FieldChange] = field(default_factory=list)
    records: List[AuditRecord] = field(default_factory=list)


class UpdatePersonUseCase:
    def __init__(
        self,
        person_repository: PersonRepository,
        historial: HistorialService,
        *,
        clock: Clock,
        password_hasher: PasswordHasher,
    ) -> None:
        self._persons = person_repository
        self._historial = historial
        self._clock = clock
        self._hasher = password_hasher

    async def execute(
        self,
        person_id: UUID,
        patch: Mapping[str, Any],
        *,
        actor_id: str | None = None,
    ) -> UpdatePersonResult:
        if "email" in patch:
            raise ValidationError("Email cannot be updated.")

        current = await self._persons.find_by_id(person_id)
        if current is None:
            raise NotFoundError("User", person_id)

        # update_with valida la password en claro; el hash se aplica después
        updated = current.update_with(patch, at=self._clock.now(), by=actor_id)
        normalized = {key: getattr(updated, key) for key in patch}
        changes = diff_person(current, normalized)

        if patch.get("password"):
            updated = replace(updated, password=self._hasher.hash(patch["password"]))

        saved = await self._persons.update(updated)
        logger.info(
            "Usuario actualizado",
            extra={
                "person_id": str(saved.id),
                "changed_fields": [c.field for c in changes],
            },
        )

        metadata = {"person": {"name": saved.full_name, "email": saved.email}}
        records = await audit_all_best_effort(
            (
                self._historial.record_update(
                    saved.id, EntityType.PERSON, change, actor_id, metadata=metadata
                )
                for change in changes
            ),
            operation="update_person",
            entity_id=saved.id,
        )
        return UpdatePersonResult(person=saved, changes=changes, records=records)


class ChangePasswordUseCase:
    """Cambio de password verificando la actual."""

    def __init__(
        self,
        person_repository: PersonRepository,
        historial: HistorialService,
        *,
        clock: Clock,
        password_hasher: PasswordHasher,
    ) -> None:
        self._persons = person_repository
        self._historial = historial
        self._clock = clock
        self._hasher = password_hasher

    async def execute(
        self,
        person_id: UUID,
        *,
        current_password: str,
        new_password: str,
        actor_id: str | None = None,
    ) -> Person:
        person = await self._persons.find_by_id(person_id)
        if person is None:
            raise NotFoundError("User", person_id)

        if not self._hasher.verify(person.password, current_password):
            raise ValidationError("Current password is incorrect.")

        # Valida largo mínimo sobre la password en claro
        candidate = person.update_with(
            {"password": new_password}, at=self._clock.now(), by=actor_id
        )
        saved = await self._persons.update(
            replace(candidate, password=self._hasher.hash(new_password))
        )
        logger.info("Password actualizada", extra={"person_id": str(saved.id)})

        await audit_best_effort(
            self._historial.record_update(
                saved.id,
                EntityType.PERSON,
                FieldChange("password", PROTECTED_VALUE, UPDATED_VALUE),
                actor_id,
            ),
            operation="change_password",
            entity_id=saved.id,
        )
        return saved
